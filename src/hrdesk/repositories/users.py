"""Repository for interacting with employee profiles."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import User
from .base import BaseRepository


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class UserRepository(BaseRepository[User]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_by_emails(self, emails: Sequence[str]) -> list[User]:
        """Return the users whose email is in ``emails`` (order not preserved)."""
        if not emails:
            return []
        result = await self.session.execute(select(User).where(User.email.in_(list(emails))))
        return list(result.scalars().all())

    async def search_by_name_prefix(self, prefix: str, *, limit: int = 10) -> list[User]:
        """Case-insensitive ``full_name`` prefix search ordered by name."""
        pattern = f"{_escape_like(prefix.lower())}%"
        query = (
            select(User)
            .where(User.full_name.is_not(None))
            .where(func.lower(User.full_name).like(pattern, escape="\\"))
            .order_by(User.full_name, User.id)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
