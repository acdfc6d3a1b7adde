"""Entry points for the background job worker and the deadline scan trigger."""

from __future__ import annotations

import logging

from rq import Worker

from .core.config import get_settings
from .core.jobs import enqueue_deadline_scan, get_job_connection, get_job_queue
from .core.logging import configure_logging
from .realtime import RedisChangePublisher, feed

logger = logging.getLogger(__name__)


def run() -> None:
    """Start an rq worker bound to the configured queue."""

    settings = get_settings()
    configure_logging(settings)

    connection = get_job_connection()
    queue = get_job_queue()
    worker_name = settings.job_worker_name or None

    # Job commits must reach realtime streams served by the web processes.
    feed.install()
    if settings.realtime_relay_enabled:
        feed.attach_relay(RedisChangePublisher(connection, settings.realtime_channel))

    logger.info(
        "Starting rq worker '%s' listening on queue '%s'",
        worker_name or "anonymous",
        queue.name,
        extra={"queue": queue.name, "worker_name": worker_name or "anonymous"},
    )
    worker = Worker([queue], connection=connection, name=worker_name)
    worker.work(with_scheduler=True)


def enqueue_scan() -> None:
    """Queue one deadline scan; meant to be run from cron or a scheduler."""

    configure_logging(get_settings())
    job = enqueue_deadline_scan()
    logger.info("Deadline scan queued as %s", job.id, extra={"job_id": job.id})


if __name__ == "__main__":  # pragma: no cover - script entry point
    run()
