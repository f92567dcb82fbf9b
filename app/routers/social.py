"""
Social router.

POST   /api/follows                   - follow a user
DELETE /api/follows/{following_id}    - unfollow
GET    /api/follows/{following_id}    - is the current user following?
POST   /api/likes                     - like a post
DELETE /api/likes/{post_id}           - unlike
GET    /api/likes/{post_id}           - has the current user liked it?
POST   /api/comments                  - comment on a post
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.core.deps import get_current_user_id
from app.db.base import get_db
from app.routers.serializers import comment_to_response, follow_to_response, like_to_response
from app.schemas.common import ErrorResponse
from app.schemas.social import (
    CommentRequest,
    CommentResponse,
    FollowRequest,
    FollowResponse,
    FollowStatusResponse,
    LikeRequest,
    LikeResponse,
    LikeStatusResponse,
)
from app.services import social

router = APIRouter(prefix="/api", tags=["social"])


# ---------------------------------------------------------------------------
# Follows
# ---------------------------------------------------------------------------

@router.post(
    "/follows",
    response_model=FollowResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Follow a user",
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Already following."},
        422: {"model": ErrorResponse, "description": "Self-follow or validation error."},
    },
)
def follow(
    payload: FollowRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return follow_to_response(social.follow_user(db, user_id, payload.following_id))


@router.delete(
    "/follows/{following_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unfollow a user (no-op if not following)",
)
def unfollow(
    following_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    social.unfollow_user(db, user_id, following_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/follows/{following_id}", response_model=FollowStatusResponse)
def follow_status(
    following_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return FollowStatusResponse(following=social.is_following(db, user_id, following_id))


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------

@router.post(
    "/likes",
    response_model=LikeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Like a post",
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Already liked."},
    },
)
def like(
    payload: LikeRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return like_to_response(social.like_post(db, user_id, payload.post_id))


@router.delete(
    "/likes/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a like (no-op if not liked)",
)
def unlike(
    post_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    social.unlike_post(db, user_id, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/likes/{post_id}", response_model=LikeStatusResponse)
def like_status(
    post_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return LikeStatusResponse(liked=social.is_post_liked(db, user_id, post_id))


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

@router.post(
    "/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
    responses={404: {"model": ErrorResponse}},
)
def comment(
    payload: CommentRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return comment_to_response(
        social.add_comment(db, user_id, payload.post_id, payload.content)
    )
