"""
User profile schemas.

GET/PUT /api/auth/user     → UserUpsertRequest → UserResponse
PATCH   /api/users/profile → ProfileUpdateRequest → UserResponse
"""
from typing import Annotated, Optional
from pydantic import BaseModel, ConfigDict, Field


class UserUpsertRequest(BaseModel):
    """Profile fields forwarded by the identity provider."""
    email: Optional[str] = Field(default=None, max_length=255)
    username: Optional[Annotated[str, Field(min_length=1, max_length=64)]] = None
    first_name: Optional[str] = Field(default=None, max_length=128)
    last_name: Optional[str] = Field(default=None, max_length=128)
    profile_image_url: Optional[str] = Field(default=None, max_length=512)
    bio: Optional[str] = Field(default=None, max_length=2_000)


class ProfileUpdateRequest(UserUpsertRequest):
    """Same fields; only the ones present in the body are written."""


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    current_streak: int
    longest_streak: int
    level: int
    total_posts: int
    followers_count: int
    following_count: int
    last_post_date: Optional[str] = None
