"""FastAPI authentication dependencies for route protection."""

import uuid

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import ACCESS, decode_token
from app.database import get_db
from app.errors import AuthenticationError, ForbiddenError
from app.models.user import User

# Missing credentials are reported by get_current_user as 401, not by the scheme.
_bearer_scheme = HTTPBearer(auto_error=False)


async def _resolve_user(db: AsyncSession, token: str) -> User | None:
    """Return the active user an access token belongs to, or None."""
    try:
        payload = decode_token(token)
    except JWTError:
        return None

    # Refresh tokens are not accepted as sessions
    if payload.get("type") != ACCESS:
        return None

    sub: str | None = payload.get("sub")
    if sub is None:
        return None

    try:
        user_id = uuid.UUID(sub)
    except ValueError:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Return the authenticated user for the request's Bearer token.

    Raises:
        AuthenticationError: No token, or the token is invalid, expired, of the
            wrong type, or names an unknown or inactive user.
    """
    if credentials is None:
        raise AuthenticationError()

    user = await _resolve_user(db, credentials.credentials)
    if user is None:
        raise AuthenticationError()
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like ``get_current_user`` but returns ``None`` instead of raising."""
    if credentials is None:
        return None
    return await _resolve_user(db, credentials.credentials)


async def get_admin_user(user: User = Depends(get_current_user)) -> User:
    """Require an authenticated user with the ``admin`` role."""
    if user.role != "admin":
        raise ForbiddenError("Admin access required")
    return user
