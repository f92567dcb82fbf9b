from pydantic import BaseModel, Field


class AnalyticsResponse(BaseModel):
    user_id: str
    total_posts: int
    posts_by_category: dict[str, int]
    current_streak: int
    longest_streak: int
    level: int
    monthly_posts: int = Field(description="Posts dated within the last ANALYTICS_WINDOW_DAYS days.")
