"""
Per-user analytics: totals, category breakdown and recent activity.

Read-only; served from the denormalized user counters plus two aggregate
queries over `posts`. Unknown users get an all-zero summary.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.post import Post
from app.services.users import get_user


@dataclass
class UserAnalytics:
    user_id: str
    total_posts: int = 0
    posts_by_category: dict[str, int] = field(default_factory=dict)
    current_streak: int = 0
    longest_streak: int = 0
    level: int = 0
    monthly_posts: int = 0   # posts dated within the analytics window


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def get_user_analytics(
    db: Session,
    user_id: str,
    today: Optional[date] = None,
    window_days: Optional[int] = None,
) -> UserAnalytics:
    user = get_user(db, user_id)
    if user is None:
        return UserAnalytics(user_id=user_id)

    window = window_days if window_days is not None else settings.ANALYTICS_WINDOW_DAYS
    # `window` calendar days ending today, today included.
    cutoff = (today or _today()) - timedelta(days=window)

    rows = (
        db.query(Post.category, func.count(Post.id))
        .filter(Post.user_id == user_id)
        .group_by(Post.category)
        .all()
    )
    monthly = (
        db.query(func.count(Post.id))
        .filter(Post.user_id == user_id, Post.post_date > cutoff)
        .scalar()
        or 0
    )
    return UserAnalytics(
        user_id=user_id,
        total_posts=user.total_posts or 0,
        posts_by_category={category: count for category, count in rows},
        current_streak=user.current_streak or 0,
        longest_streak=user.longest_streak or 0,
        level=user.level or 0,
        monthly_posts=monthly,
    )
