"""Deadline scan job."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import get_settings
from ..core.context import bind_request_id, clear_request_id, reset_request_id
from ..core.jobs import execute_in_job_session
from ..services.notifications import DeadlineScanResult, NotificationService

logger = logging.getLogger(__name__)


async def _scan_deadlines(window_days: int) -> DeadlineScanResult:
    async def _invoke(session: AsyncSession) -> DeadlineScanResult:
        return await NotificationService(session).scan_deadlines(window_days=window_days)

    return await execute_in_job_session(_invoke)


def scan_task_deadlines_job(request_id: str | None = None) -> dict[str, Any]:
    """Notify assignees of open tasks that are due soon.

    Safe to run repeatedly: each task is notified at most once per UTC day.
    """

    token = bind_request_id(request_id) if request_id else None
    if token is None:
        clear_request_id()
    try:
        result = asyncio.run(_scan_deadlines(get_settings().deadline_window_days))
        logger.info(
            "Deadline scan job completed",
            extra={"scanned": result.scanned, "notified": result.notified},
        )
        return asdict(result)
    finally:
        if token is not None:
            reset_request_id(token)
        else:
            clear_request_id()


__all__ = ["scan_task_deadlines_job"]
