"""Repositories for the IP allowlist and failed-login records."""

from __future__ import annotations

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import AllowedIP, FailedLoginAttempt
from .base import BaseRepository


class AllowedIPRepository(BaseRepository[AllowedIP]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AllowedIP)

    async def get_by_address(self, ip_address: str) -> AllowedIP | None:
        """Exact string lookup; no CIDR or normalisation is applied."""
        result = await self.session.execute(
            select(AllowedIP).where(AllowedIP.ip_address == ip_address)
        )
        return result.scalar_one_or_none()

    async def list_ordered(self) -> list[AllowedIP]:
        result = await self.session.execute(
            select(AllowedIP).order_by(AllowedIP.created_at.desc(), AllowedIP.id.desc())
        )
        return list(result.scalars().all())


class FailedLoginRepository(BaseRepository[FailedLoginAttempt]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, FailedLoginAttempt)

    async def get_by_email(self, email: str) -> FailedLoginAttempt | None:
        result = await self.session.execute(
            select(FailedLoginAttempt).where(FailedLoginAttempt.email == email)
        )
        return result.scalar_one_or_none()

    async def list_recent(self, *, limit: int = 100) -> list[FailedLoginAttempt]:
        result = await self.session.execute(
            select(FailedLoginAttempt)
            .order_by(FailedLoginAttempt.last_attempt.desc(), FailedLoginAttempt.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
