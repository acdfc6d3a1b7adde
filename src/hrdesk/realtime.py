"""Store-level change feed and reconciled list views.

Changes are captured from SQLAlchemy session events: unit-of-work inserts,
updates and deletes are collected after each flush, bulk ORM ``UPDATE`` /
``DELETE`` statements when they execute. Nothing is published until the
owning transaction commits; a rollback discards what was collected.
Committed changes can also be relayed to other processes over redis pub/sub.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import threading
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from redis import Redis
from redis.asyncio import Redis as AsyncRedis
from redis.exceptions import RedisError
from sqlalchemy import event
from sqlalchemy.orm import ORMExecuteState, Session

from .core.config import Settings
from .models import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")

WATCHED_COLLECTIONS = frozenset({"tasks", "notifications", "comments"})
_PENDING_KEY = "hrdesk.realtime.pending"


class ChangeEvent(BaseModel):
    """One committed change to a watched collection.

    ``row_id`` and ``task_id`` are ``None`` for bulk statements, which are
    delivered to every subscriber of the collection. ``origin`` identifies the
    feed that captured the change so a process can ignore its own relayed events.
    """

    model_config = ConfigDict(frozen=True)

    collection: str
    operation: str
    row_id: int | None = None
    task_id: int | None = None
    id: str = Field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = Field(default_factory=utcnow)
    origin: str | None = None


ChangeCallback = Callable[[ChangeEvent], Awaitable[None] | None]


def _row_event(instance: Any, operation: str) -> ChangeEvent | None:
    collection = getattr(type(instance), "__tablename__", None)
    if collection not in WATCHED_COLLECTIONS:
        return None
    row_id = getattr(instance, "id", None)
    task_id = row_id if collection == "tasks" else getattr(instance, "task_id", None)
    return ChangeEvent(collection=collection, operation=operation, row_id=row_id, task_id=task_id)


class Subscription:
    """Handle for one listener; ``cancel()`` releases it.

    Events are queued on the subscriber's own event loop and handed to the
    callback one at a time, so a slow callback never blocks the publisher.
    """

    def __init__(
        self,
        feed: "ChangeFeed",
        collection: str,
        callback: ChangeCallback,
        *,
        task_id: int | None,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self.collection = collection
        self.task_id = task_id
        self._feed = feed
        self._callback = callback
        self._loop = loop
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()
        self._consumer = loop.create_task(self._consume())
        self._closed = False

    @property
    def active(self) -> bool:
        return not self._closed

    def matches(self, change: ChangeEvent) -> bool:
        if change.collection != self.collection:
            return False
        if self.task_id is None or change.task_id is None:
            return True
        return change.task_id == self.task_id

    def deliver(self, change: ChangeEvent) -> None:
        if self._closed:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._queue.put_nowait(change)
            return
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, change)
        except RuntimeError:
            logger.debug("Dropping subscription bound to a closed event loop")
            self.cancel()

    async def _consume(self) -> None:
        while True:
            change = await self._queue.get()
            try:
                result = self._callback(change)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(
                    "Change subscriber failed",
                    extra={"collection": change.collection, "operation": change.operation},
                )

    def cancel(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed._discard(self)
        if not self._consumer.done():
            if self._loop.is_closed():
                return
            self._consumer.cancel()

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.cancel()


class ChangeFeed:
    """Process-wide publisher of committed store changes.

    With a relay attached, every committed batch is also forwarded to the
    other processes sharing the redis channel (see ``RedisChangeSubscriber``).
    """

    def __init__(self) -> None:
        self.origin = uuid4().hex
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()
        self._installed = False
        self._relay: RedisChangePublisher | None = None
        self._pending_key = f"{_PENDING_KEY}.{self.origin}"

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(
        self,
        collection: str,
        callback: ChangeCallback,
        *,
        task_id: int | None = None,
    ) -> Subscription:
        """Register ``callback`` for ``collection``; must run inside an event loop."""

        if collection not in WATCHED_COLLECTIONS:
            raise ValueError(f"Unknown collection {collection!r}")
        subscription = Subscription(
            self,
            collection,
            callback,
            task_id=task_id,
            loop=asyncio.get_running_loop(),
        )
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _discard(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def publish(self, changes: Sequence[ChangeEvent]) -> None:
        if not changes:
            return
        with self._lock:
            subscriptions = list(self._subscriptions)
        for change in changes:
            for subscription in subscriptions:
                if subscription.matches(change):
                    subscription.deliver(change)

    def clear(self) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.cancel()

    # SQLAlchemy session hooks

    def install(self) -> None:
        """Attach the capture hooks to every ``Session``; safe to call repeatedly."""

        if self._installed:
            return
        event.listen(Session, "after_flush", self._after_flush)
        event.listen(Session, "do_orm_execute", self._do_orm_execute)
        event.listen(Session, "after_commit", self._after_commit)
        event.listen(Session, "after_rollback", self._discard_pending)
        event.listen(Session, "after_soft_rollback", self._after_soft_rollback)
        self._installed = True

    def uninstall(self) -> None:
        if not self._installed:
            return
        event.remove(Session, "after_flush", self._after_flush)
        event.remove(Session, "do_orm_execute", self._do_orm_execute)
        event.remove(Session, "after_commit", self._after_commit)
        event.remove(Session, "after_rollback", self._discard_pending)
        event.remove(Session, "after_soft_rollback", self._after_soft_rollback)
        self._installed = False

    def attach_relay(self, relay: "RedisChangePublisher | None") -> None:
        self._relay = relay

    def receive(self, change: ChangeEvent) -> bool:
        """Publish a change relayed from another process; own changes are skipped."""

        if change.origin == self.origin:
            return False
        self.publish([change])
        return True

    def _pending(self, session: Session) -> list[ChangeEvent]:
        return session.info.setdefault(self._pending_key, [])

    def _after_flush(self, session: Session, flush_context: Any) -> None:
        pending = self._pending(session)
        for operation, instances in (
            ("insert", session.new),
            ("update", session.dirty),
            ("delete", session.deleted),
        ):
            for instance in instances:
                if operation == "update" and not session.is_modified(instance):
                    continue
                change = _row_event(instance, operation)
                if change is not None:
                    pending.append(change)

    def _do_orm_execute(self, orm_execute_state: ORMExecuteState) -> None:
        if not (orm_execute_state.is_update or orm_execute_state.is_delete):
            return
        mapper = orm_execute_state.bind_mapper
        table = getattr(mapper, "local_table", None)
        collection = getattr(table, "name", None)
        if collection not in WATCHED_COLLECTIONS:
            return
        operation = "update" if orm_execute_state.is_update else "delete"
        self._pending(orm_execute_state.session).append(
            ChangeEvent(collection=collection, operation=operation)
        )

    def _after_commit(self, session: Session) -> None:
        pending = session.info.pop(self._pending_key, [])
        if not pending:
            return
        changes = [change.model_copy(update={"origin": self.origin}) for change in pending]
        self.publish(changes)
        if self._relay is not None:
            self._relay.publish(changes)

    def _discard_pending(self, session: Session) -> None:
        session.info.pop(self._pending_key, None)

    def _after_soft_rollback(self, session: Session, previous_transaction: Any) -> None:
        self._discard_pending(session)


feed = ChangeFeed()


class RedisChangePublisher:
    """Forward committed changes to the shared redis channel."""

    def __init__(self, connection: Redis, channel: str) -> None:
        self._connection = connection
        self._channel = channel

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisChangePublisher":
        connection = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=False)
        return cls(connection, settings.realtime_channel)

    def publish(self, changes: Sequence[ChangeEvent]) -> None:
        # Runs inside the commit hook: the transaction is already durable.
        for change in changes:
            try:
                self._connection.publish(self._channel, change.model_dump_json().encode("utf-8"))
            except RedisError:
                logger.warning(
                    "Could not relay change to other processes",
                    exc_info=True,
                    extra={"collection": change.collection, "channel": self._channel},
                )
                return

    def close(self) -> None:
        with contextlib.suppress(RedisError):
            self._connection.close()


class RedisChangeSubscriber:
    """Feed changes committed by other processes into a local ``ChangeFeed``."""

    def __init__(
        self,
        change_feed: ChangeFeed,
        redis_factory: Callable[[], AsyncRedis],
        *,
        channel: str,
        initial_delay: float = 1.0,
        max_delay: float = 30.0,
        poll_timeout: float = 1.0,
    ) -> None:
        self._feed = change_feed
        self._redis_factory = redis_factory
        self._channel = channel
        self._initial_delay = initial_delay
        self._max_delay = max_delay
        self._poll_timeout = poll_timeout
        self._redis: AsyncRedis | None = None
        self._pubsub: Any = None
        self._task: asyncio.Task[None] | None = None
        self._stopped = asyncio.Event()

    @classmethod
    def from_settings(cls, change_feed: ChangeFeed, settings: Settings) -> "RedisChangeSubscriber":
        return cls(
            change_feed,
            lambda: AsyncRedis.from_url(settings.redis_url, encoding="utf-8", decode_responses=False),
            channel=settings.realtime_channel,
            initial_delay=settings.realtime_reconnect_initial_delay,
            max_delay=settings.realtime_reconnect_max_delay,
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        self._stopped.clear()
        try:
            await self._initialise_pubsub()
        except (RedisError, OSError):
            logger.warning(
                "Change subscriber could not subscribe; retrying in the background",
                exc_info=True,
                extra={"channel": self._channel},
            )
        self._task = asyncio.create_task(self._listen_loop(), name="hrdesk-change-subscriber")

    async def stop(self) -> None:
        self._stopped.set()
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        await self._close_pubsub()
        if self._redis is not None:
            with contextlib.suppress(RedisError):
                await self._redis.aclose()
            self._redis = None

    async def _close_pubsub(self) -> None:
        if self._pubsub is None:
            return
        with contextlib.suppress(RedisError):
            await self._pubsub.unsubscribe(self._channel)
            await self._pubsub.aclose()
        self._pubsub = None

    async def _initialise_pubsub(self) -> None:
        await self._close_pubsub()
        if self._redis is not None:
            with contextlib.suppress(RedisError):
                await self._redis.aclose()
        self._redis = self._redis_factory()
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        self._pubsub = pubsub

    def _handle(self, data: Any) -> None:
        payload = data.decode("utf-8") if isinstance(data, bytes) else str(data)
        try:
            change = ChangeEvent.model_validate_json(payload)
        except ValueError:
            logger.warning("Ignoring malformed change message", extra={"channel": self._channel})
            return
        self._feed.receive(change)

    async def _listen_loop(self) -> None:
        backoff = self._initial_delay

        while not self._stopped.is_set():
            try:
                if self._pubsub is None:
                    await self._initialise_pubsub()
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=self._poll_timeout,
                )
                if message is not None and message.get("type") == "message":
                    self._handle(message.get("data"))
            except asyncio.CancelledError:
                raise
            except (RedisError, OSError):
                logger.exception("Change subscriber lost its redis connection; retrying")
                await self._close_pubsub()
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, self._max_delay)
            else:
                backoff = self._initial_delay


class ReconciledView(Generic[T]):
    """A list kept in step with the store by full re-fetch on every change.

    ``refresh()`` is idempotent: when the fetched list equals the current
    one nothing changes and ``False`` is returned. Overlapping refreshes
    resolve to the most recently started fetch.
    """

    def __init__(
        self,
        loader: Callable[[], Awaitable[list[T]]],
        *,
        collection: str,
        task_id: int | None = None,
        change_feed: ChangeFeed | None = None,
        on_change: Callable[[list[T]], None] | None = None,
    ) -> None:
        self._loader = loader
        self._collection = collection
        self._task_id = task_id
        self._feed = change_feed or feed
        self._on_change = on_change
        self._items: list[T] = []
        self._subscription: Subscription | None = None
        self._started = 0
        self._applied = 0
        self.version = 0

    @property
    def items(self) -> list[T]:
        return list(self._items)

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def open(self) -> list[T]:
        """Subscribe, then perform the initial fetch."""

        if self._subscription is None:
            self._subscription = self._feed.subscribe(
                self._collection,
                self._handle_change,
                task_id=self._task_id,
            )
        await self.refresh()
        return self.items

    async def refresh(self) -> bool:
        self._started += 1
        ticket = self._started
        items = await self._loader()
        if ticket < self._applied:
            return False
        self._applied = ticket
        if self.version and items == self._items:
            return False
        self._items = list(items)
        self.version += 1
        if self._on_change is not None:
            self._on_change(self.items)
        return True

    async def _handle_change(self, change: ChangeEvent) -> None:
        await self.refresh()

    async def close(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    async def __aenter__(self) -> "ReconciledView[T]":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


__all__ = [
    "ChangeEvent",
    "ChangeFeed",
    "ReconciledView",
    "RedisChangePublisher",
    "RedisChangeSubscriber",
    "Subscription",
    "WATCHED_COLLECTIONS",
    "feed",
]
