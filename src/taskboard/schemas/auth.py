"""Pydantic schemas for registration, login and token exchange."""

from datetime import datetime

from pydantic import Field

from taskboard.db.models import Role
from taskboard.schemas import CamelModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(CamelModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=2, max_length=100)


class LoginRequest(CamelModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)


class UserRead(CamelModel):
    """Public view of a user — never includes the hash or refresh token."""
    id: int
    email: str
    name: str
    role: Role
    created_at: datetime
    updated_at: datetime


class UserSummary(CamelModel):
    """Compact user reference embedded in todos."""
    id: int
    name: str
    email: str


class AuthResponse(CamelModel):
    user: UserRead
    access_token: str


class AccessTokenResponse(CamelModel):
    access_token: str


class MessageResponse(CamelModel):
    message: str
