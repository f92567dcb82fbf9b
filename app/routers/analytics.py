"""
Analytics router.

GET /api/analytics/user/{user_id}   - posting summary for the dashboard
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.schemas.analytics import AnalyticsResponse
from app.services.analytics import get_user_analytics

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get(
    "/user/{user_id}",
    response_model=AnalyticsResponse,
    summary="Posting analytics for a user",
)
def user_analytics(user_id: str, db: Session = Depends(get_db)):
    """
    Totals and streak counters come from the user's profile; category
    breakdown and `monthly_posts` are aggregated from `posts`.
    Unknown users get an all-zero summary.
    """
    a = get_user_analytics(db, user_id)
    return AnalyticsResponse(
        user_id=a.user_id,
        total_posts=a.total_posts,
        posts_by_category=a.posts_by_category,
        current_streak=a.current_streak,
        longest_streak=a.longest_streak,
        level=a.level,
        monthly_posts=a.monthly_posts,
    )
