"""
Error envelope shared by every router's `responses=` docs.
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    model_config = ConfigDict(from_attributes=True)

    code: str = Field(examples=["USER_NOT_FOUND", "VALIDATION_ERROR", "PERSISTENCE_ERROR"])
    message: str
    details: Optional[dict[str, Any]] = None
