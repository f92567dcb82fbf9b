"""
Streak schemas.

GET /api/streaks/user/{user_id}/active → StreakResponse | null
GET /api/streaks/user/{user_id}        → StreakListResponse
"""
from pydantic import BaseModel, ConfigDict, Field


class StreakResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    start_date: str
    end_date: str
    length: int = Field(description="Days covered, inclusive.")
    is_active: bool


class StreakListResponse(BaseModel):
    total: int
    items: list[StreakResponse]


class ProgressionResponse(BaseModel):
    """What a post did to its author's streak and level."""
    transition: str = Field(description='"started" | "extended" | "broken" | "unchanged"')
    current_streak: int
    longest_streak: int
    level: int
    total_posts: int
    active_streak: StreakResponse
