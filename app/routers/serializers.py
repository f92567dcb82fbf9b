"""
ORM → response model helpers shared by the routers.
"""
from __future__ import annotations

from app.models.comment import Comment
from app.models.follow import Follow
from app.models.like import Like
from app.models.post import Post
from app.models.streak import Streak
from app.models.user import User
from app.schemas.post import PostResponse
from app.schemas.social import CommentResponse, FollowResponse, LikeResponse
from app.schemas.streak import ProgressionResponse, StreakResponse
from app.schemas.user import UserResponse
from app.services.streak_engine import StreakOutcome


def _iso(dt) -> str:
    return dt.isoformat() if dt else ""


def user_to_response(u: User) -> UserResponse:
    return UserResponse(
        id=u.id,
        email=u.email,
        username=u.username,
        first_name=u.first_name,
        last_name=u.last_name,
        profile_image_url=u.profile_image_url,
        bio=u.bio,
        current_streak=u.current_streak,
        longest_streak=u.longest_streak,
        level=u.level,
        total_posts=u.total_posts,
        followers_count=u.followers_count,
        following_count=u.following_count,
        last_post_date=str(u.last_post_date) if u.last_post_date else None,
    )


def streak_to_response(s: Streak) -> StreakResponse:
    return StreakResponse(
        id=s.id,
        user_id=s.user_id,
        start_date=str(s.start_date),
        end_date=str(s.end_date),
        length=s.length,
        is_active=s.is_active,
    )


def progression_to_response(o: StreakOutcome) -> ProgressionResponse:
    return ProgressionResponse(
        transition=o.transition,
        current_streak=o.current_streak,
        longest_streak=o.longest_streak,
        level=o.level,
        total_posts=o.total_posts,
        active_streak=streak_to_response(o.active_streak),
    )


def post_to_response(p: Post) -> PostResponse:
    return PostResponse(
        id=p.id,
        user_id=p.user_id,
        title=p.title,
        content=p.content,
        category=p.category,
        is_public=p.is_public,
        level=p.level,
        media_urls=list(p.media_urls or []),
        media_type=p.media_type,
        location=p.location,
        tags=list(p.tags or []),
        likes_count=p.likes_count,
        comments_count=p.comments_count,
        shares_count=p.shares_count,
        post_date=str(p.post_date),
        created_at=_iso(p.created_at),
    )


def follow_to_response(f: Follow) -> FollowResponse:
    return FollowResponse(
        id=f.id,
        follower_id=f.follower_id,
        following_id=f.following_id,
        created_at=_iso(f.created_at),
    )


def like_to_response(like: Like) -> LikeResponse:
    return LikeResponse(
        id=like.id,
        user_id=like.user_id,
        post_id=like.post_id,
        created_at=_iso(like.created_at),
    )


def comment_to_response(c: Comment) -> CommentResponse:
    return CommentResponse(
        id=c.id,
        user_id=c.user_id,
        post_id=c.post_id,
        content=c.content,
        created_at=_iso(c.created_at),
    )
