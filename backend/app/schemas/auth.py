"""Pydantic v2 request/response schemas for authentication endpoints."""

import uuid
from datetime import datetime

from pydantic import EmailStr, Field

from app.schemas.base import CamelModel

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RegisterRequest(CamelModel):
    """Schema for user registration."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(None, max_length=255)


class LoginRequest(CamelModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str


class RefreshRequest(CamelModel):
    refresh_token: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TokenResponse(CamelModel):
    """JWT token pair returned on successful authentication."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserResponse(CamelModel):
    """Public user profile information."""

    id: uuid.UUID
    email: str
    name: str | None = None
    is_active: bool
    role: str
    created_at: datetime


class AuthResponse(CamelModel):
    """Combined user + tokens returned on register/login."""

    user: UserResponse
    tokens: TokenResponse


class SessionResponse(CamelModel):
    """Current session; ``user`` is null when not signed in."""

    user: UserResponse | None = None
