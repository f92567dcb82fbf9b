"""
Social service: follows, likes and comments, with their denormalized counters.

  follow / unfollow   → users.following_count (follower), users.followers_count (followed)
  like / unlike       → posts.likes_count
  comment             → posts.comments_count

Counters are changed under a row lock in the same commit as the row they
summarize, and never drop below zero.
"""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core.errors import ConflictError, SelfFollowError, UserNotFoundError
from app.db.base import atomic
from app.models.comment import Comment
from app.models.follow import Follow
from app.models.like import Like
from app.services.posts import get_post_or_404
from app.services.users import get_user_for_update, get_user_or_404

logger = logging.getLogger(__name__)


def _find_follow(db: Session, follower_id: str, following_id: str) -> Follow | None:
    return (
        db.query(Follow)
        .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
        .first()
    )


def _find_like(db: Session, user_id: str, post_id: int) -> Like | None:
    return (
        db.query(Like)
        .filter(Like.user_id == user_id, Like.post_id == post_id)
        .first()
    )


def _lock_pair(db: Session, follower_id: str, following_id: str):
    # Lock in id order so two opposite follows can't deadlock.
    locked = {
        uid: get_user_for_update(db, uid)
        for uid in sorted((follower_id, following_id))
    }
    return locked[follower_id], locked[following_id]


# ---------------------------------------------------------------------------
# Follows
# ---------------------------------------------------------------------------

def follow_user(db: Session, follower_id: str, following_id: str) -> Follow:
    if follower_id == following_id:
        raise SelfFollowError(follower_id)

    with atomic(db, "follow_user"):
        follower, followed = _lock_pair(db, follower_id, following_id)
        if _find_follow(db, follower_id, following_id) is not None:
            raise ConflictError(
                message=f"Already following {following_id}.",
                details={"following_id": following_id},
            )
        follow = Follow(follower_id=follower_id, following_id=following_id)
        db.add(follow)
        follower.following_count = (follower.following_count or 0) + 1
        followed.followers_count = (followed.followers_count or 0) + 1

    db.refresh(follow)
    logger.info("%s followed %s", follower_id, following_id)
    return follow


def unfollow_user(db: Session, follower_id: str, following_id: str) -> bool:
    """Returns False when there was nothing to remove."""
    with atomic(db, "unfollow_user"):
        try:
            follower, followed = _lock_pair(db, follower_id, following_id)
        except UserNotFoundError:
            return False
        # Looked up under the pair lock so a concurrent unfollow sees it gone.
        follow = _find_follow(db, follower_id, following_id)
        if follow is None:
            return False
        db.delete(follow)
        follower.following_count = max((follower.following_count or 0) - 1, 0)
        followed.followers_count = max((followed.followers_count or 0) - 1, 0)

    logger.info("%s unfollowed %s", follower_id, following_id)
    return True


def is_following(db: Session, follower_id: str, following_id: str) -> bool:
    return _find_follow(db, follower_id, following_id) is not None


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------

def like_post(db: Session, user_id: str, post_id: int) -> Like:
    with atomic(db, "like_post"):
        get_user_or_404(db, user_id)
        post = get_post_or_404(db, post_id, for_update=True)
        if _find_like(db, user_id, post_id) is not None:
            raise ConflictError(
                message=f"Post {post_id} is already liked.",
                details={"post_id": post_id},
            )
        like = Like(user_id=user_id, post_id=post_id)
        db.add(like)
        post.likes_count = (post.likes_count or 0) + 1

    db.refresh(like)
    return like


def unlike_post(db: Session, user_id: str, post_id: int) -> bool:
    """Returns False when the post wasn't liked."""
    with atomic(db, "unlike_post"):
        like = _find_like(db, user_id, post_id)
        if like is None:
            return False
        post = get_post_or_404(db, post_id, for_update=True)
        db.delete(like)
        post.likes_count = max((post.likes_count or 0) - 1, 0)
    return True


def is_post_liked(db: Session, user_id: str, post_id: int) -> bool:
    return _find_like(db, user_id, post_id) is not None


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

def add_comment(db: Session, user_id: str, post_id: int, content: str) -> Comment:
    with atomic(db, "add_comment"):
        get_user_or_404(db, user_id)
        post = get_post_or_404(db, post_id, for_update=True)
        comment = Comment(user_id=user_id, post_id=post_id, content=content)
        db.add(comment)
        post.comments_count = (post.comments_count or 0) + 1

    db.refresh(comment)
    return comment
