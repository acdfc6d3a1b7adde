"""RQ integration helpers for background jobs."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import datetime, timezone
from threading import Lock
from typing import TYPE_CHECKING, TypeVar
from uuid import uuid4

from redis import Redis
from redis.exceptions import RedisError
from rq import Queue
from rq.job import Job, Retry

from .config import get_settings

if TYPE_CHECKING:  # pragma: no cover - typing only
    from sqlmodel.ext.asyncio.session import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

_job_connection: Redis | None = None
_job_queue: Queue | None = None
_job_lock = Lock()
_job_session_factory: Callable[[], AbstractAsyncContextManager["AsyncSession"]] | None = None


class JobQueueUnavailableError(RuntimeError):
    """Raised when the Redis-backed job queue cannot be reached."""


def set_job_connection(connection: Redis | None) -> None:
    """Inject a Redis connection for job queue operations (primarily for tests)."""

    global _job_connection, _job_queue
    with _job_lock:
        _job_connection = connection
        _job_queue = None


def close_job_connection() -> None:
    global _job_connection, _job_queue
    with _job_lock:
        connection = _job_connection
        if connection is not None:
            try:
                connection.close()
            except RedisError:  # pragma: no cover - closing failures are best-effort
                logger.debug("Failed to close Redis connection cleanly.", exc_info=True)
        _job_connection = None
        _job_queue = None


def set_job_session_factory(
    factory: Callable[[], AbstractAsyncContextManager["AsyncSession"]] | None,
) -> None:
    """Override the session factory used when executing jobs."""

    global _job_session_factory
    with _job_lock:
        _job_session_factory = factory


@asynccontextmanager
async def _default_job_session_factory() -> AsyncIterator["AsyncSession"]:
    from ..db.session import async_session_maker  # Local import to avoid circular dependency

    async with async_session_maker() as session:
        yield session


async def execute_in_job_session(
    callback: Callable[["AsyncSession"], Awaitable[T]],
) -> T:
    """Execute a coroutine with a managed database session for job processing."""

    factory = _job_session_factory or _default_job_session_factory
    async with factory() as session:
        return await callback(session)


def _resolve_job_connection() -> Redis:
    global _job_connection
    if _job_connection is not None:
        return _job_connection
    settings = get_settings()
    try:
        connection = Redis.from_url(settings.redis_url)
        connection.ping()
    except RedisError as exc:  # pragma: no cover - network failures
        logger.error("Redis job queue unavailable.", exc_info=True)
        raise JobQueueUnavailableError("Job queue is unavailable.") from exc
    _job_connection = connection
    return connection


def get_job_connection() -> Redis:
    """Return the Redis connection used for job processing."""

    with _job_lock:
        return _resolve_job_connection()


def get_job_queue() -> Queue:
    """Return the job queue configured for the application."""

    global _job_queue
    with _job_lock:
        if _job_queue is not None:
            return _job_queue
        connection = _resolve_job_connection()
        settings = get_settings()
        timeout = settings.job_default_timeout or None
        _job_queue = Queue(settings.job_queue_name, connection=connection, default_timeout=timeout)
        return _job_queue


def enqueue_deadline_scan(*, request_id: str | None = None) -> Job:
    """Enqueue one run of the task deadline scan."""

    from ..jobs.deadlines import scan_task_deadlines_job

    queue = get_job_queue()
    settings = get_settings()
    job_id = f"deadline-scan:{uuid4()}"
    retry: Retry | None = None
    if settings.job_max_retries > 0:
        intervals = settings.job_retry_backoff_seconds or [0]
        retry = Retry(max=settings.job_max_retries, interval=intervals)
    result_ttl = settings.job_result_ttl_seconds or None
    try:
        job = queue.enqueue(
            scan_task_deadlines_job,
            request_id=request_id,
            job_id=job_id,
            retry=retry,
            result_ttl=result_ttl,
            failure_ttl=result_ttl,
            description="Scan open tasks for approaching deadlines",
            job_timeout=settings.job_default_timeout or None,
        )
    except RedisError as exc:  # pragma: no cover - network failures
        logger.error("Failed to enqueue deadline scan job.", exc_info=True)
        raise JobQueueUnavailableError("Unable to enqueue job; Redis is unavailable.") from exc
    logger.info("Enqueued deadline scan job %s", job.id, extra={"job_id": job.id})
    return job


def job_enqueued_at(job: Job) -> datetime:
    value = job.enqueued_at
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


__all__ = [
    "JobQueueUnavailableError",
    "close_job_connection",
    "enqueue_deadline_scan",
    "execute_in_job_session",
    "get_job_connection",
    "get_job_queue",
    "job_enqueued_at",
    "set_job_connection",
    "set_job_session_factory",
]
