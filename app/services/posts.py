"""
Post service: the only caller of the streak engine.

The Post row and the progression update (streak + user counters) commit
together or not at all.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, PostNotFoundError
from app.db.base import atomic
from app.models.post import Post
from app.services.streak_engine import StreakOutcome, apply_post, coerce_post_date
from app.services.users import get_user_for_update

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

@dataclass
class PostDraft:
    """Lightweight DTO so the service layer stays schema-agnostic."""
    title: str
    content: str
    category: str
    is_public: bool = True
    media_urls: list[str] = field(default_factory=list)
    media_type: str = "text"
    location: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    post_date: Optional[date] = None


@dataclass
class CreatedPost:
    post: Post
    progression: StreakOutcome


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def create_post(db: Session, user_id: str, draft: PostDraft) -> CreatedPost:
    """Persist a post and advance the author's streak / level in one commit."""
    post_date = coerce_post_date(draft.post_date) if draft.post_date is not None else _today()

    with atomic(db, "create_post"):
        user = get_user_for_update(db, user_id)
        post = Post(
            user_id=user.id,
            title=draft.title,
            content=draft.content,
            category=draft.category,
            is_public=draft.is_public,
            level=(user.level or 1) + 1,
            media_urls=list(draft.media_urls),
            media_type=draft.media_type,
            location=draft.location,
            tags=list(draft.tags),
            post_date=post_date,
        )
        db.add(post)
        db.flush()  # get post.id before the engine runs
        outcome = apply_post(db, user, post_date)

    db.refresh(post)
    db.refresh(outcome.active_streak)
    logger.info("Post %s created by %s (level %d)", post.id, user_id, post.level)
    return CreatedPost(post=post, progression=outcome)


def get_post_or_404(db: Session, post_id: int, for_update: bool = False) -> Post:
    q = db.query(Post).filter(Post.id == post_id)
    if for_update:
        q = q.populate_existing().with_for_update()
    post = q.first()
    if post is None:
        raise PostNotFoundError(post_id)
    return post


def set_post_visibility(db: Session, user_id: str, post_id: int, is_public: bool) -> Post:
    with atomic(db, "set_post_visibility"):
        post = get_post_or_404(db, post_id, for_update=True)
        if post.user_id != user_id:
            raise ForbiddenError(
                message="Only the author can change a post's visibility.",
                details={"post_id": post_id},
            )
        post.is_public = is_public
    db.refresh(post)
    return post
