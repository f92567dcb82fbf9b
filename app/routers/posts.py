"""
Posts router.

POST  /api/posts                       - create a post (advances streak + level)
PATCH /api/posts/{post_id}/visibility  - toggle public / private
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.deps import get_current_user_id
from app.db.base import get_db
from app.routers.serializers import post_to_response, progression_to_response
from app.schemas.common import ErrorResponse
from app.schemas.post import CreatePostRequest, CreatePostResponse, PostResponse, VisibilityRequest
from app.services.posts import PostDraft, create_post, set_post_visibility

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.post(
    "",
    response_model=CreatePostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a post",
    responses={
        404: {"model": ErrorResponse, "description": "Author does not exist."},
        422: {"model": ErrorResponse, "description": "Validation error."},
        500: {"model": ErrorResponse, "description": "Persistence error; nothing was saved."},
    },
)
def new_post(
    payload: CreatePostRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Persist the post and, in the same transaction, run the streak engine:

    | Gap since active streak's last day | Effect |
    |---|---|
    | no active streak | new streak of 1 day |
    | 1 day | streak extended |
    | > 1 day | old streak closed, new streak of 1 day |
    | 0 or negative | streak unchanged |

    Level and total post count go up by one on every post.
    """
    draft = PostDraft(**payload.model_dump())
    created = create_post(db, user_id, draft)
    return CreatePostResponse(
        post=post_to_response(created.post),
        progression=progression_to_response(created.progression),
    )


@router.patch(
    "/{post_id}/visibility",
    response_model=PostResponse,
    summary="Make a post public or private",
    responses={
        403: {"model": ErrorResponse, "description": "Not the author."},
        404: {"model": ErrorResponse},
    },
)
def change_visibility(
    post_id: int,
    payload: VisibilityRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    post = set_post_visibility(db, user_id, post_id, payload.is_public)
    return post_to_response(post)
