"""Client-side IP access guard.

The guard is advisory: it asks the decision endpoint for a verdict each time
a protected route is entered and decides whether to render or redirect. The
real enforcement happens server side.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

import httpx

from .core.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNAUTHORIZED_PATH = "/unauthorized"
NOT_AUTHORIZED_NOTICE = "Your IP address is not authorized to access this application."
CHECK_FAILED_NOTICE = "Failed to validate IP address access. Please try again later."


class GuardState(str, Enum):
    PENDING = "pending"
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass(frozen=True, slots=True)
class GuardVerdict:
    state: GuardState
    ip: str | None = None
    notice: str | None = None
    redirect_to: str | None = None

    @property
    def allowed(self) -> bool:
        return self.state is GuardState.ALLOWED


@dataclass(frozen=True, slots=True)
class GuardedResult(Generic[T]):
    """Outcome of one guarded route entry; ``content`` is set only when allowed."""

    verdict: GuardVerdict
    content: T | None = None


class IPAccessGuard:
    """Pending -> Allowed | Denied, re-evaluated on every route entry."""

    def __init__(
        self,
        validation_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        unauthorized_path: str = UNAUTHORIZED_PATH,
    ) -> None:
        self._validation_url = validation_url
        self._timeout = timeout
        self._client = client
        self._unauthorized_path = unauthorized_path
        self._state = GuardState.PENDING

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> "IPAccessGuard":
        return cls(
            settings.ip_validation_url,
            timeout=settings.ip_guard_timeout_seconds,
            client=client,
        )

    @property
    def state(self) -> GuardState:
        return self._state

    def _deny(self, notice: str, ip: str | None = None) -> GuardVerdict:
        self._state = GuardState.DENIED
        return GuardVerdict(
            state=GuardState.DENIED,
            ip=ip,
            notice=notice,
            redirect_to=self._unauthorized_path,
        )

    async def _request(self, headers: Mapping[str, str] | None) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(self._validation_url, headers=headers, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(self._validation_url, headers=headers)

    async def check(self, headers: Mapping[str, str] | None = None) -> GuardVerdict:
        """Ask the decision endpoint for a verdict.

        Any transport error, non-2xx answer, unreadable body or a call that
        outlives the timeout counts as a denial.
        """

        self._state = GuardState.PENDING
        try:
            response = await asyncio.wait_for(self._request(headers), timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except asyncio.TimeoutError:
            logger.warning("IP validation timed out", extra={"url": self._validation_url})
            return self._deny(CHECK_FAILED_NOTICE)
        except (httpx.HTTPError, ValueError):
            logger.warning("IP validation failed", extra={"url": self._validation_url}, exc_info=True)
            return self._deny(CHECK_FAILED_NOTICE)

        ip = payload.get("ip") if isinstance(payload, dict) else None
        if not isinstance(payload, dict) or payload.get("allowed") is not True:
            return self._deny(NOT_AUTHORIZED_NOTICE, ip=ip)
        self._state = GuardState.ALLOWED
        return GuardVerdict(state=GuardState.ALLOWED, ip=ip)

    async def enter(
        self,
        render: Callable[[], Awaitable[T]],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> GuardedResult[T]:
        """Render protected content only after an ``allowed`` verdict."""

        verdict = await self.check(headers)
        if not verdict.allowed:
            return GuardedResult(verdict=verdict)
        return GuardedResult(verdict=verdict, content=await render())


__all__ = [
    "CHECK_FAILED_NOTICE",
    "GuardState",
    "GuardVerdict",
    "GuardedResult",
    "IPAccessGuard",
    "NOT_AUTHORIZED_NOTICE",
    "UNAUTHORIZED_PATH",
]
