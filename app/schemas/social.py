"""
Follow / like / comment schemas.
"""
from typing import Annotated
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FollowRequest(BaseModel):
    following_id: Annotated[str, Field(min_length=1, max_length=64)]


class FollowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    follower_id: str
    following_id: str
    created_at: str


class FollowStatusResponse(BaseModel):
    following: bool


class LikeRequest(BaseModel):
    post_id: int = Field(ge=1)


class LikeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    post_id: int
    created_at: str


class LikeStatusResponse(BaseModel):
    liked: bool


class CommentRequest(BaseModel):
    post_id: int = Field(ge=1)
    content: Annotated[str, Field(min_length=1, max_length=2_000)]

    @field_validator("content", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("content must not be empty or whitespace-only")
        return v


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    post_id: int
    content: str
    created_at: str
