"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings, get_settings
from .core.context import resolve_client_ip
from .core.security import JWTError, decode_access_token
from .db.session import async_session_maker, get_session
from .errors import AccessDeniedError, AuthenticationError, PermissionDeniedError
from .models import User, UserRole
from .repositories import UserRepository
from .schemas.auth import TokenPayload
from .services.access import AccessDecision, AccessService

SettingsDependency = Annotated[Settings, Depends(get_settings)]

_oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{get_settings().api_prefix}/auth/login")


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""

    async for session in get_session():
        yield session


DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def get_session_factory() -> SessionFactory:
    """Return the factory long-lived streams use to open a session per fetch."""

    return async_session_maker


SessionFactoryDependency = Annotated[SessionFactory, Depends(get_session_factory)]


def get_client_ip(request: Request, settings: SettingsDependency) -> str:
    """Return the candidate origin address resolved by the request middleware."""

    client_ip = getattr(request.state, "client_ip", None)
    if client_ip:
        return client_ip
    return resolve_client_ip(request.headers, sentinel=settings.unknown_ip_sentinel)


ClientIPDependency = Annotated[str, Depends(get_client_ip)]


async def evaluate_client_ip(
    client_ip: ClientIPDependency,
    session: DatabaseSessionDependency,
) -> AccessDecision:
    return await AccessService(session).evaluate(client_ip)


async def require_allowed_ip(
    decision: Annotated[AccessDecision, Depends(evaluate_client_ip)],
) -> AccessDecision:
    """Reject requests whose origin is not allowlisted."""

    if not decision.allowed:
        raise AccessDeniedError(decision.message, ip=decision.ip)
    return decision


AllowedIPDependency = Depends(require_allowed_ip)


def _decode_token(token: str, settings: Settings) -> TokenPayload:
    try:
        payload = decode_access_token(token, settings)
    except JWTError as exc:
        raise AuthenticationError() from exc
    try:
        return TokenPayload.model_validate(payload)
    except PydanticValidationError as exc:  # pragma: no cover - malformed but signed token
        raise AuthenticationError() from exc


def require_current_user(required_role: UserRole | None = None) -> Callable[..., Awaitable[User]]:
    """Return a dependency enforcing authentication and an optional role."""

    async def _dependency(
        token: Annotated[str, Depends(_oauth2_scheme)],
        session: DatabaseSessionDependency,
        settings: SettingsDependency,
    ) -> User:
        token_payload = _decode_token(token, settings)
        try:
            user_id = int(token_payload.sub)
        except ValueError as exc:  # pragma: no cover - subject is always numeric
            raise AuthenticationError() from exc

        user = await UserRepository(session).get(user_id)
        if user is None:
            raise AuthenticationError()
        if not user.is_active:
            raise PermissionDeniedError("User account is inactive.", code="inactive_user")
        if required_role == UserRole.ADMIN and not user.is_admin:
            raise PermissionDeniedError()
        return user

    return _dependency


CurrentUserDependency = Annotated[User, Depends(require_current_user())]
AdminUserDependency = Annotated[User, Depends(require_current_user(UserRole.ADMIN))]


__all__ = [
    "AdminUserDependency",
    "AllowedIPDependency",
    "ClientIPDependency",
    "CurrentUserDependency",
    "DatabaseSessionDependency",
    "SessionFactoryDependency",
    "SettingsDependency",
    "evaluate_client_ip",
    "get_client_ip",
    "get_db_session",
    "get_session_factory",
    "require_allowed_ip",
    "require_current_user",
]
