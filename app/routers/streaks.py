"""
Streaks router (read-only).

GET /api/streaks/user/{user_id}/active   - active streak, or null
GET /api/streaks/user/{user_id}          - streak history (paginated, newest first)
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.routers.serializers import streak_to_response
from app.schemas.streak import StreakListResponse, StreakResponse
from app.services.streak_engine import get_active_streak, list_streaks

router = APIRouter(prefix="/api/streaks", tags=["streaks"])


@router.get(
    "/user/{user_id}/active",
    response_model=Optional[StreakResponse],
    summary="The streak still eligible to be extended",
)
def active_streak(user_id: str, db: Session = Depends(get_db)):
    """Returns `null` when the user has never posted (or doesn't exist)."""
    streak = get_active_streak(db, user_id)
    return streak_to_response(streak) if streak else None


@router.get(
    "/user/{user_id}",
    response_model=StreakListResponse,
    summary="Streak history, newest first",
)
def streak_history(
    user_id: str,
    limit: int = Query(default=50, ge=1, le=200, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    db: Session = Depends(get_db),
):
    total, items = list_streaks(db, user_id, limit=limit, offset=offset)
    return StreakListResponse(
        total=total,
        items=[streak_to_response(s) for s in items],
    )
