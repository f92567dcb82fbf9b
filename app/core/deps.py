"""
Request-scoped dependencies.

Sign-in is handled by the upstream identity provider, which forwards the
authenticated user's id in a header (settings.USER_ID_HEADER).
"""
from fastapi import Request

from app.core.config import settings
from app.core.errors import UnauthenticatedError


def get_current_user_id(request: Request) -> str:
    user_id = (request.headers.get(settings.USER_ID_HEADER) or "").strip()
    if not user_id:
        raise UnauthenticatedError(header=settings.USER_ID_HEADER)
    return user_id
