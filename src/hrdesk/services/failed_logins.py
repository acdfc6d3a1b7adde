"""Accumulation of invalid-credential sign-in attempts."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import FailedLoginAttempt, utcnow
from ..repositories import FailedLoginRepository

logger = logging.getLogger(__name__)


class FailedLoginService:
    """Counts failures per email; no lockout is applied."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = FailedLoginRepository(session)

    async def record(self, email: str, ip_address: str | None) -> FailedLoginAttempt:
        """Insert a record with count 1 or bump the existing one for ``email``."""
        attempt = await self._repository.get_by_email(email)
        now = utcnow()
        if attempt is None:
            attempt = FailedLoginAttempt(
                email=email,
                ip_address=ip_address,
                attempt_count=1,
                last_attempt=now,
            )
            await self._repository.add(attempt)
        else:
            attempt.attempt_count += 1
            attempt.last_attempt = now
            attempt.ip_address = ip_address
        await self._session.commit()
        await self._repository.refresh(attempt)
        logger.warning(
            "Failed login recorded",
            extra={"email": email, "ip": ip_address, "attempt_count": attempt.attempt_count},
        )
        return attempt

    async def list_recent(self, *, limit: int = 100) -> list[FailedLoginAttempt]:
        return await self._repository.list_recent(limit=limit)


__all__ = ["FailedLoginService"]
