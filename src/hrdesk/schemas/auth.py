"""Schemas describing authentication payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .user import UserPublic


class SignupRequest(BaseModel):
    """Incoming payload for registering a new employee."""

    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str | None = None
    position: str | None = None


class AuthTokens(BaseModel):
    access_token: str
    token_type: str = Field(default="bearer", frozen=True)
    expires_in: int


class AuthResponse(BaseModel):
    """Authentication response containing the issued token and user metadata."""

    user: UserPublic
    tokens: AuthTokens


class TokenPayload(BaseModel):
    """Validated JWT payload."""

    model_config = ConfigDict(extra="ignore")

    sub: str
    exp: datetime
    iat: datetime
    jti: str
    roles: list[str]


class FailedLoginRequest(BaseModel):
    """Report of one invalid-credential sign-in."""

    email: str = Field(min_length=1, max_length=320)
    ip_address: str | None = Field(default=None, max_length=45)


__all__ = [
    "AuthResponse",
    "AuthTokens",
    "FailedLoginRequest",
    "SignupRequest",
    "TokenPayload",
]
