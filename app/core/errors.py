"""
Custom exception hierarchy for Postora.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class PostoraException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class UserNotFoundError(PostoraException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "USER_NOT_FOUND"

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User {user_id} does not exist.",
            details={"user_id": user_id},
        )


class PostNotFoundError(PostoraException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "POST_NOT_FOUND"

    def __init__(self, post_id: int):
        super().__init__(
            message=f"Post {post_id} does not exist.",
            details={"post_id": post_id},
        )


class InvalidPostDateError(PostoraException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_POST_DATE"

    def __init__(self, value: Any):
        super().__init__(
            message=f"Post date {value!r} is not a valid calendar date (YYYY-MM-DD).",
            details={"value": str(value)},
        )


class PersistenceError(PostoraException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "PERSISTENCE_ERROR"

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(
            message=message,
            details={"operation": operation} if operation else {},
        )


class ConflictError(PostoraException):
    http_status = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class ForbiddenError(PostoraException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class SelfFollowError(PostoraException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "SELF_FOLLOW"

    def __init__(self, user_id: str):
        super().__init__(
            message="Users cannot follow themselves.",
            details={"user_id": user_id},
        )


class UnauthenticatedError(PostoraException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"

    def __init__(self, header: str):
        super().__init__(
            message=f"Missing authenticated user id (header {header}).",
            details={"header": header},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def postora_exception_handler(request: Request, exc: PostoraException) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
