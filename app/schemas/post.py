"""
Post schemas.

POST  /api/posts                        → CreatePostRequest → CreatePostResponse
PATCH /api/posts/{post_id}/visibility   → VisibilityRequest → PostResponse
"""
from __future__ import annotations

from datetime import date
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.streak import ProgressionResponse


class CreatePostRequest(BaseModel):
    title: Annotated[str, Field(min_length=1, max_length=256)]
    content: Annotated[str, Field(min_length=1, max_length=10_000)]
    category: Annotated[str, Field(min_length=1, max_length=64, examples=["travel", "fitness"])]
    is_public: bool = True
    media_urls: list[str] = Field(default_factory=list)
    media_type: str = Field(default="text", max_length=32)
    location: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    post_date: Optional[date] = Field(
        default=None,
        description="Calendar day the post counts for. Defaults to today (UTC).",
        examples=["2024-01-01"],
    )

    @field_validator("title", "content", "category", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("must not be empty or whitespace-only")
        return v


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    content: str
    category: str
    is_public: bool
    level: int
    media_urls: list[str]
    media_type: str
    location: Optional[str] = None
    tags: list[str]
    likes_count: int
    comments_count: int
    shares_count: int
    post_date: str
    created_at: str


class CreatePostResponse(BaseModel):
    post: PostResponse
    progression: ProgressionResponse


class VisibilityRequest(BaseModel):
    is_public: bool
