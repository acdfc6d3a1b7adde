"""Notification rules, delivery and the recipient-facing notification service."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Iterable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError
from ..models import (
    Notification,
    NotificationStatus,
    NotificationType,
    Task,
    TaskStatus,
    ensure_utc,
    utcnow,
)
from ..repositories import NotificationRepository, TaskRepository, UserRepository

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class NotificationDraft:
    """A notification decided by the rules but not yet addressed to a user id."""

    recipient: str
    task_id: int
    title: str
    message: str
    type: NotificationType


def days_until(deadline: datetime, now: datetime) -> int:
    """Whole days until ``deadline``, rounded up; negative once overdue."""

    delta = ensure_utc(deadline) - ensure_utc(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def assignment_drafts(task: Task) -> list[NotificationDraft]:
    """A new or reassigned task notifies its assignee."""

    return [
        NotificationDraft(
            recipient=task.assigned_to,
            task_id=task.id,
            title="New Task Assignment",
            message=f'You have been assigned to task "{task.title}" by {task.created_by}',
            type=NotificationType.ASSIGNMENT,
        )
    ]


def status_change_drafts(task: Task, *, actor: str) -> list[NotificationDraft]:
    """Drafts for a task that has just moved to ``task.status``.

    The assignee is told unless they made the change; the creator is told
    when they are neither the actor nor the assignee. Wrapping back to
    ``pending`` is silent.
    """

    if task.status == TaskStatus.COMPLETED:
        type_ = NotificationType.COMPLETED
        message = f'Task "{task.title}" has been completed by {actor}'
    elif task.status == TaskStatus.IN_PROGRESS:
        type_ = NotificationType.STATUS
        message = f'Task "{task.title}" is now in progress, updated by {actor}'
    else:
        return []

    recipients: list[str] = []
    if task.assigned_to != actor:
        recipients.append(task.assigned_to)
    if task.created_by not in (actor, task.assigned_to):
        recipients.append(task.created_by)
    return [
        NotificationDraft(
            recipient=recipient,
            task_id=task.id,
            title="Task Status Update",
            message=message,
            type=type_,
        )
        for recipient in recipients
    ]


def deadline_drafts(task: Task, *, now: datetime, window_days: int) -> list[NotificationDraft]:
    if task.status == TaskStatus.COMPLETED:
        return []
    days = days_until(task.deadline, now)
    if days > window_days:
        return []
    return [
        NotificationDraft(
            recipient=task.assigned_to,
            task_id=task.id,
            title="Task Deadline Approaching",
            message=f'Task "{task.title}" is due in {days} days',
            type=NotificationType.DEADLINE,
        )
    ]


def mention_drafts(task: Task, *, actor: str, mentioned: Sequence[str]) -> list[NotificationDraft]:
    return [
        NotificationDraft(
            recipient=email,
            task_id=task.id,
            title="New Mention",
            message=f'{actor} mentioned you on task "{task.title}"',
            type=NotificationType.MENTION,
        )
        for email in dict.fromkeys(mentioned)
    ]


class NotificationDispatcher:
    """Persist drafts without ever failing the caller.

    Drafts whose recipient is not a known identity are dropped. Any failure
    rolls back the notification batch, is logged, and yields an empty list;
    callers commit their own write before dispatching and pass the instances
    they still need as ``keep`` so they are reloaded after a rollback.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._users = UserRepository(session)
        self._notifications = NotificationRepository(session)

    async def dispatch(
        self,
        drafts: Iterable[NotificationDraft],
        *,
        keep: Sequence[SQLModel] = (),
    ) -> list[Notification]:
        pending = list(drafts)
        if not pending:
            return []
        try:
            users = await self._users.list_by_emails([draft.recipient for draft in pending])
            ids_by_email = {user.email: user.id for user in users}
            notifications = [
                Notification(
                    user_id=ids_by_email[draft.recipient],
                    task_id=draft.task_id,
                    title=draft.title,
                    message=draft.message,
                    type=draft.type,
                )
                for draft in pending
                if draft.recipient in ids_by_email
            ]
            dropped = len(pending) - len(notifications)
            if dropped:
                logger.info("Dropped %d notification(s) for unknown recipients", dropped)
            await self._notifications.add_all(notifications)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            logger.exception(
                "Failed to create notifications",
                extra={"task_ids": sorted({draft.task_id for draft in pending})},
            )
            await self._reload(keep)
            return []
        return notifications

    async def _reload(self, instances: Sequence[SQLModel]) -> None:
        for instance in instances:
            try:
                await self._session.refresh(instance)
            except SQLAlchemyError:
                logger.warning("Could not reload %r after notification rollback", instance)


@dataclass(slots=True)
class DeadlineScanResult:
    scanned: int
    notified: int


class NotificationService:
    """Recipient-scoped notification reads and writes, plus the deadline scan."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = NotificationRepository(session)
        self._dispatcher = NotificationDispatcher(session)

    async def list_for_user(
        self,
        user_id: int,
        *,
        status: NotificationStatus | None = None,
        limit: int = 50,
    ) -> tuple[list[Notification], int]:
        items = await self._repository.list_for_user(user_id, status=status, limit=limit)
        unread = await self._repository.count_unread(user_id)
        return items, unread

    async def _get_owned(self, notification_id: int, user_id: int) -> Notification:
        notification = await self._repository.get(notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("Notification not found.")
        return notification

    async def mark_read(self, notification_id: int, user_id: int) -> Notification:
        """Mark one notification read; repeating the call is a no-op."""
        notification = await self._get_owned(notification_id, user_id)
        if notification.status != NotificationStatus.READ:
            notification.status = NotificationStatus.READ
            await self._session.commit()
            await self._repository.refresh(notification)
        return notification

    async def mark_all_read(self, user_id: int) -> int:
        updated = await self._repository.mark_all_read(user_id)
        await self._session.commit()
        return updated

    async def delete(self, notification_id: int, user_id: int) -> None:
        notification = await self._get_owned(notification_id, user_id)
        await self._repository.delete(notification)
        await self._session.commit()

    async def delete_all(self, user_id: int) -> int:
        removed = await self._repository.delete_for_user(user_id)
        await self._session.commit()
        return removed

    async def scan_deadlines(
        self,
        *,
        window_days: int,
        now: datetime | None = None,
    ) -> DeadlineScanResult:
        """Notify assignees of open tasks due within ``window_days``.

        A task receives at most one ``deadline`` notification per UTC day,
        so repeated scans are idempotent within a day.
        """

        now = ensure_utc(now or utcnow())
        day_start = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
        tasks = await TaskRepository(self._session).list_open_due_before(
            now + timedelta(days=window_days)
        )
        drafts: list[NotificationDraft] = []
        for task in tasks:
            already_sent = await self._repository.exists_since(
                task_id=task.id,
                type_=NotificationType.DEADLINE,
                since=day_start,
            )
            if already_sent:
                continue
            drafts.extend(deadline_drafts(task, now=now, window_days=window_days))
        created = await self._dispatcher.dispatch(drafts)
        logger.info(
            "Deadline scan finished",
            extra={"scanned": len(tasks), "notified": len(created)},
        )
        return DeadlineScanResult(scanned=len(tasks), notified=len(created))


__all__ = [
    "DeadlineScanResult",
    "NotificationDispatcher",
    "NotificationDraft",
    "NotificationService",
    "assignment_drafts",
    "days_until",
    "deadline_drafts",
    "mention_drafts",
    "status_change_drafts",
]
