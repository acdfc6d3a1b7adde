"""Service layer for the employee directory."""

from __future__ import annotations

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.security import get_password_hash
from ..models import User, UserRole
from ..repositories import UserRepository


class UserService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = UserRepository(session)

    async def create_user(
        self,
        *,
        email: str,
        password: str,
        full_name: str | None = None,
        position: str | None = None,
        is_active: bool = True,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create and persist a new employee profile."""
        user = User(
            email=email,
            full_name=full_name,
            position=position,
            is_active=is_active,
            role=role,
            hashed_password=get_password_hash(password),
        )
        await self._repository.add(user)
        await self._session.commit()
        await self._repository.refresh(user)
        return user

    async def get_user_by_email(self, email: str) -> User | None:
        return await self._repository.get_by_email(email)

    async def search_directory(self, prefix: str, *, limit: int = 10) -> list[User]:
        """Type-ahead lookup: case-insensitive full-name prefix, alphabetical."""
        if not prefix:
            return []
        return await self._repository.search_by_name_prefix(prefix, limit=limit)


__all__ = ["UserService"]
