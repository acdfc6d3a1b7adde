"""Password hashing, bearer token helpers and the shared admin secret check."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(slots=True)
class GeneratedToken:
    """Represents a signed access token with associated metadata."""

    token: str
    expires_at: datetime
    jti: str


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _unique_roles(roles: Sequence[str] | None) -> list[str]:
    if not roles:
        return []
    return list(dict.fromkeys(roles))


def create_access_token(
    *,
    subject: str | int,
    roles: Sequence[str] | None,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> GeneratedToken:
    """Create a signed JWT access token for ``subject``."""

    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = now + expires_delta
    payload: dict[str, Any] = {
        "sub": str(subject),
        "iat": now,
        "exp": expire,
        "roles": _unique_roles(roles),
        "jti": uuid4().hex,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return GeneratedToken(token=token, expires_at=expire, jti=payload["jti"])


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """Decode and verify an access token, raising ``JWTError`` when invalid."""

    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def admin_secret_matches(username: str, password: str, settings: Settings) -> bool:
    """Exact-match check of the shared admin credential pair.

    Returns ``False`` whenever the pair is not configured.
    """

    if not settings.admin_credentials_configured:
        return False
    username_ok = secrets.compare_digest(username.encode(), str(settings.admin_username).encode())
    password_ok = secrets.compare_digest(password.encode(), str(settings.admin_password).encode())
    return username_ok and password_ok


__all__ = [
    "GeneratedToken",
    "JWTError",
    "admin_secret_matches",
    "create_access_token",
    "decode_access_token",
    "get_password_hash",
    "verify_password",
]
