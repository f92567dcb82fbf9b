"""
User service: profile upsert / update and the locked loader used by every
write path that touches a user's counters.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, UserNotFoundError
from app.db.base import atomic
from app.models.user import User

logger = logging.getLogger(__name__)

# Only these columns are writable from the outside; counters are engine-owned.
PROFILE_FIELDS = (
    "email",
    "username",
    "first_name",
    "last_name",
    "profile_image_url",
    "bio",
)


def get_user(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def get_user_or_404(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def get_user_for_update(db: Session, user_id: str) -> User:
    """
    Load a user with a row lock (SELECT ... FOR UPDATE) so read-modify-write
    on its counters is serialized per user. Raises UserNotFoundError.
    """
    user = (
        db.query(User)
        .filter(User.id == user_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def _check_unique(db: Session, user_id: str, fields: dict[str, Any]) -> None:
    clauses = []
    if fields.get("username"):
        clauses.append(User.username == fields["username"])
    if fields.get("email"):
        clauses.append(User.email == fields["email"])
    if not clauses:
        return
    clash = (
        db.query(User.id)
        .filter(User.id != user_id, or_(*clauses))
        .first()
    )
    if clash is not None:
        raise ConflictError(
            message="Username or email is already taken.",
            details={k: fields[k] for k in ("username", "email") if fields.get(k)},
        )


def upsert_user(db: Session, user_id: str, fields: dict[str, Any]) -> User:
    """Insert the user if missing, otherwise overwrite the given profile fields."""
    data = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
    with atomic(db, "upsert_user"):
        _check_unique(db, user_id, data)
        user = db.get(User, user_id)
        if user is None:
            user = User(id=user_id)
            db.add(user)
            logger.info("Created user %s", user_id)
        for key, value in data.items():
            setattr(user, key, value)
    db.refresh(user)
    return user


def update_profile(db: Session, user_id: str, fields: dict[str, Any]) -> User:
    """Partial update: only keys present in `fields` are written."""
    data = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
    with atomic(db, "update_profile"):
        user = get_user_or_404(db, user_id)
        _check_unique(db, user_id, data)
        for key, value in data.items():
            setattr(user, key, value)
    db.refresh(user)
    return user
