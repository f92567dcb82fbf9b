"""
Streak & Progression Engine - keeps a user's streak history and profile
counters in step with every post they create.

Transitions (gap = post_date - active_streak.end_date, in days)
---------------------------------------------------------------
  STARTED    no active streak      → open Streak(start=end=post_date, length=1)
  EXTENDED   gap == 1              → active.end_date = post_date, length += 1
  BROKEN     gap > 1               → close active (is_active=False), open new one
  UNCHANGED  gap <= 0              → same-day or backfilled post, streak untouched

Every post, whatever the transition:
  total_posts += 1, level += 1, last_post_date = max(last_post_date, post_date)

current_streak always equals the active streak's length; longest_streak only
grows.

Public API
----------
apply_post(db, user, post_date)       → StreakOutcome   (flush only, no commit)
record_post(db, user_id, post_date)   → StreakOutcome   (locks user, commits)
get_active_streak(db, user_id)        → Streak | None
list_streaks(db, user_id, limit, offset) → (total, list[Streak])
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.errors import InvalidPostDateError
from app.db.base import atomic
from app.models.streak import Streak
from app.models.user import User
from app.services.users import get_user_for_update

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Transition constants
# ---------------------------------------------------------------------------

class StreakTransition:
    STARTED   = "started"
    EXTENDED  = "extended"
    BROKEN    = "broken"
    UNCHANGED = "unchanged"


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class StreakOutcome:
    """What a single post did to the user's progression."""
    user_id: str
    post_date: date
    transition: str
    active_streak: Streak
    closed_streak: Optional[Streak]   # set only for BROKEN
    current_streak: int
    longest_streak: int
    level: int
    total_posts: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def coerce_post_date(value: Any) -> date:
    """
    Accept a date, a datetime (time-of-day dropped) or an ISO string.
    Raises InvalidPostDateError for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        try:
            return date.fromisoformat(raw)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(raw).date()
        except ValueError:
            pass
    raise InvalidPostDateError(value)


def _open_streak(db: Session, user_id: str, post_date: date) -> Streak:
    streak = Streak(
        user_id=user_id,
        start_date=post_date,
        end_date=post_date,
        length=1,
        is_active=True,
    )
    db.add(streak)
    return streak


# ---------------------------------------------------------------------------
# Core - flush only (shared by record_post and post creation)
# ---------------------------------------------------------------------------

def apply_post(db: Session, user: User, post_date: date) -> StreakOutcome:
    """
    Apply one post to `user`'s streak state and counters.
    Calls db.flush() but does NOT commit; the caller owns the transaction and
    must already hold the user's row lock.
    """
    active = get_active_streak(db, user.id)
    closed: Optional[Streak] = None

    if active is None:
        transition = StreakTransition.STARTED
        active = _open_streak(db, user.id, post_date)
        user.current_streak = 1
    else:
        gap = (post_date - active.end_date).days
        if gap == 1:
            transition = StreakTransition.EXTENDED
            active.end_date = post_date
            active.length = active.length + 1
            user.current_streak = active.length
        elif gap > 1:
            transition = StreakTransition.BROKEN
            active.is_active = False
            # Close before opening: one active row per user at any flush.
            db.flush()
            closed = active
            active = _open_streak(db, user.id, post_date)
            user.current_streak = 1
        else:
            transition = StreakTransition.UNCHANGED

    if transition != StreakTransition.UNCHANGED:
        user.longest_streak = max(user.longest_streak or 0, user.current_streak)

    user.total_posts = (user.total_posts or 0) + 1
    user.level = (user.level or 1) + 1
    if user.last_post_date is None or post_date > user.last_post_date:
        user.last_post_date = post_date

    db.flush()

    logger.info(
        "Streak %s for user %s on %s (length=%d longest=%d level=%d)",
        transition, user.id, post_date, active.length,
        user.longest_streak, user.level,
    )
    return StreakOutcome(
        user_id=user.id,
        post_date=post_date,
        transition=transition,
        active_streak=active,
        closed_streak=closed,
        current_streak=user.current_streak,
        longest_streak=user.longest_streak,
        level=user.level,
        total_posts=user.total_posts,
    )


# ---------------------------------------------------------------------------
# Public - standalone entry point
# ---------------------------------------------------------------------------

def record_post(db: Session, user_id: str, post_date: Any) -> StreakOutcome:
    """
    Record a post date for `user_id` as one atomic unit.

    Raises UserNotFoundError / InvalidPostDateError before anything is
    written, PersistenceError if the commit fails (everything rolled back).
    """
    day = coerce_post_date(post_date)
    with atomic(db, "record_post"):
        user = get_user_for_update(db, user_id)
        outcome = apply_post(db, user, day)
    db.refresh(outcome.active_streak)
    return outcome


# ---------------------------------------------------------------------------
# Public - query helpers
# ---------------------------------------------------------------------------

def get_active_streak(db: Session, user_id: str) -> Optional[Streak]:
    """Most recent active streak for the user, or None."""
    return (
        db.query(Streak)
        .filter(Streak.user_id == user_id, Streak.is_active.is_(True))
        .order_by(Streak.start_date.desc())
        .first()
    )


def list_streaks(
    db: Session,
    user_id: str,
    limit: int = 50,
    offset: int = 0,
) -> tuple[int, list[Streak]]:
    """Return (total, page) of the user's streaks, newest first."""
    q = db.query(Streak).filter(Streak.user_id == user_id)
    total = q.count()
    items = (
        q.order_by(Streak.start_date.desc(), Streak.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return total, items
