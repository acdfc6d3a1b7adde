"""Authentication service encapsulating registration and token issue."""

from __future__ import annotations

import logging

from fastapi import status
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings
from ..core.security import GeneratedToken, create_access_token, verify_password
from ..errors import ApplicationError, PermissionDeniedError
from ..models import User, UserRole
from .users import UserService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._user_service = UserService(session)

    async def register_user(
        self,
        *,
        email: str,
        password: str,
        full_name: str | None = None,
        position: str | None = None,
    ) -> User:
        existing = await self._user_service.get_user_by_email(email)
        if existing is not None:
            raise ApplicationError(
                "Email is already registered.",
                code="email_taken",
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        user = await self._user_service.create_user(
            email=email,
            password=password,
            full_name=full_name,
            position=position,
            role=UserRole.USER,
        )
        logger.info("User registered", extra={"user_id": user.id})
        return user

    async def authenticate_user(self, email: str, password: str) -> User | None:
        """Return the user for valid credentials, ``None`` for invalid ones."""
        user = await self._user_service.get_user_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            return None
        if not user.is_active:
            raise PermissionDeniedError("User account is inactive.", code="inactive_user")
        return user

    def issue_token(self, user: User) -> GeneratedToken:
        if user.id is None:
            raise ApplicationError("User must be persisted before issuing tokens.")
        return create_access_token(
            subject=user.id,
            roles=[user.role.value],
            settings=self._settings,
        )


__all__ = ["AuthService"]
