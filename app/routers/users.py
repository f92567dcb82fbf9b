"""
Users router.

GET   /api/auth/user       - current user's profile
PUT   /api/auth/user       - upsert current user's profile (identity provider sync)
PATCH /api/users/profile   - partial profile update
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_current_user_id
from app.db.base import get_db
from app.routers.serializers import user_to_response
from app.schemas.common import ErrorResponse
from app.schemas.user import ProfileUpdateRequest, UserResponse, UserUpsertRequest
from app.services.users import get_user_or_404, update_profile, upsert_user

router = APIRouter(prefix="/api", tags=["users"])


@router.get(
    "/auth/user",
    response_model=UserResponse,
    summary="Current user's profile and progression counters",
    responses={
        401: {"model": ErrorResponse, "description": "No authenticated user id."},
        404: {"model": ErrorResponse, "description": "User not synced yet."},
    },
)
def current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return user_to_response(get_user_or_404(db, user_id))


@router.put(
    "/auth/user",
    response_model=UserResponse,
    summary="Create or refresh the current user's profile",
    responses={409: {"model": ErrorResponse, "description": "Username or email taken."}},
)
def upsert_current_user(
    payload: UserUpsertRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Mirror the identity provider's profile into `users`.
    Streak, level and post counters are never taken from the request.
    """
    user = upsert_user(db, user_id, payload.model_dump(exclude_unset=True))
    return user_to_response(user)


@router.patch(
    "/users/profile",
    response_model=UserResponse,
    summary="Update profile fields",
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Username or email taken."},
    },
)
def patch_profile(
    payload: ProfileUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = update_profile(db, user_id, payload.model_dump(exclude_unset=True))
    return user_to_response(user)
