"""IP allowlist decision function and allowlist administration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import DatabaseIntegrityError, NotFoundError
from ..models import AllowedIP, User
from ..repositories import AllowedIPRepository

logger = logging.getLogger(__name__)

ACCESS_GRANTED = "Access granted"
ACCESS_DENIED = "IP address not allowed"
ACCESS_ERROR = "Internal server error"


@dataclass(slots=True)
class AccessDecision:
    """Verdict for one candidate origin address.

    ``error`` is set when the verdict was forced to a denial by an internal
    failure rather than by allowlist membership.
    """

    allowed: bool
    ip: str
    message: str
    error: str | None = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"allowed": self.allowed, "message": self.message, "ip": self.ip}
        if self.error is not None:
            payload["details"] = self.error
        return payload


class AccessService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = AllowedIPRepository(session)

    async def evaluate(self, ip: str) -> AccessDecision:
        """Decide whether ``ip`` is allowlisted by exact string match.

        Fails closed: any error while consulting the allowlist yields a
        denial carrying the diagnostic text.
        """
        try:
            entry = await self._repository.get_by_address(ip)
        except Exception as exc:
            logger.exception("IP validation failed", extra={"ip": ip})
            return AccessDecision(allowed=False, ip=ip, message=ACCESS_ERROR, error=str(exc))
        if entry is None:
            logger.warning("IP access denied", extra={"ip": ip})
            return AccessDecision(allowed=False, ip=ip, message=ACCESS_DENIED)
        logger.debug("IP access granted", extra={"ip": ip})
        return AccessDecision(allowed=True, ip=ip, message=ACCESS_GRANTED)

    async def list_allowed(self) -> list[AllowedIP]:
        return await self._repository.list_ordered()

    async def add_allowed(
        self,
        *,
        ip_address: str,
        description: str | None,
        actor: User,
    ) -> AllowedIP:
        if await self._repository.get_by_address(ip_address) is not None:
            raise DatabaseIntegrityError(
                "IP address is already allowed.",
                code="duplicate_ip",
                details={"ip_address": ip_address},
            )
        entry = AllowedIP(ip_address=ip_address, description=description, created_by=actor.id)
        try:
            await self._repository.add(entry)
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise DatabaseIntegrityError(
                "IP address is already allowed.",
                code="duplicate_ip",
                details={"ip_address": ip_address},
            ) from exc
        await self._repository.refresh(entry)
        logger.info("Allowed IP added", extra={"ip": ip_address, "actor_id": actor.id})
        return entry

    async def remove_allowed(self, entry_id: int, *, actor: User) -> None:
        entry = await self._repository.get(entry_id)
        if entry is None:
            raise NotFoundError("Allowed IP not found.", details={"id": entry_id})
        await self._repository.delete(entry)
        await self._session.commit()
        logger.info("Allowed IP removed", extra={"ip": entry.ip_address, "actor_id": actor.id})


__all__ = [
    "ACCESS_DENIED",
    "ACCESS_ERROR",
    "ACCESS_GRANTED",
    "AccessDecision",
    "AccessService",
]
