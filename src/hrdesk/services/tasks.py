"""Service layer encapsulating task lifecycle operations."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError, PermissionDeniedError, ValidationError
from ..models import Task, TaskPriority, TaskStatus, User, ensure_utc, next_status
from ..repositories import TaskRepository, UserRepository
from .notifications import (
    NotificationDispatcher,
    NotificationDraft,
    assignment_drafts,
    status_change_drafts,
)

logger = logging.getLogger(__name__)


class TaskService:
    """Task orchestration; every mutation commits before notifications are sent."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = TaskRepository(session)
        self._user_repository = UserRepository(session)
        self._dispatcher = NotificationDispatcher(session)

    async def _require_identity(self, email: str) -> User:
        user = await self._user_repository.get_by_email(email)
        if user is None:
            raise ValidationError(
                "Assignee is not a known user.",
                details={"assigned_to": email},
            )
        return user

    async def _commit_and_notify(self, task: Task, drafts: list[NotificationDraft]) -> Task:
        await self._session.commit()
        await self._repository.refresh(task)
        await self._dispatcher.dispatch(drafts, keep=(task,))
        return task

    async def create_task(
        self,
        *,
        actor: User,
        title: str,
        deadline: datetime,
        assigned_to: str,
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> Task:
        """Create a task owned by ``actor`` and notify the assignee."""
        await self._require_identity(assigned_to)
        task = Task(
            title=title,
            deadline=ensure_utc(deadline),
            priority=priority,
            status=TaskStatus.PENDING,
            created_by=actor.email,
            assigned_to=assigned_to,
            user_id=actor.id,
        )
        await self._repository.add(task)
        logger.info("Task created", extra={"task_id": task.id, "assigned_to": assigned_to})
        return await self._commit_and_notify(task, assignment_drafts(task))

    async def get_task(self, task_id: int) -> Task:
        task = await self._repository.get(task_id)
        if task is None:
            raise NotFoundError("Task not found.", details={"task_id": task_id})
        return task

    async def list_tasks(
        self,
        *,
        identity: str | None = None,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Task], int]:
        return await self._repository.list_paginated(
            identity=identity,
            status=status,
            priority=priority,
            search=search,
            limit=limit,
            offset=offset,
        )

    async def advance_status(self, task_id: int, *, actor: User) -> Task:
        """Move the task one step along pending -> in-progress -> completed -> pending."""
        task = await self.get_task(task_id)
        previous = task.status
        task.status = next_status(previous)
        logger.info(
            "Task status advanced",
            extra={"task_id": task.id, "from": previous.value, "to": task.status.value},
        )
        return await self._commit_and_notify(task, status_change_drafts(task, actor=actor.email))

    async def update_task(
        self,
        task_id: int,
        *,
        actor: User,
        title: str | None = None,
        deadline: datetime | None = None,
        priority: TaskPriority | None = None,
        assigned_to: str | None = None,
        status: TaskStatus | None = None,
    ) -> Task:
        """Apply a partial update.

        A ``status`` equal to the current one is ignored; any other value must
        be the single next step of the cycle.
        """
        task = await self.get_task(task_id)
        drafts: list[NotificationDraft] = []

        status_changed = False
        if status is not None and status != task.status:
            expected = next_status(task.status)
            if status != expected:
                raise ValidationError(
                    "Task status can only advance one step at a time.",
                    details={"current": task.status.value, "allowed": expected.value},
                )
            status_changed = True

        reassigned = assigned_to is not None and assigned_to != task.assigned_to
        if reassigned:
            await self._require_identity(assigned_to)

        if title is not None:
            task.title = title
        if deadline is not None:
            task.deadline = ensure_utc(deadline)
        if priority is not None:
            task.priority = priority
        if reassigned:
            task.assigned_to = assigned_to
            drafts.extend(assignment_drafts(task))
        if status_changed:
            task.status = status
            drafts.extend(status_change_drafts(task, actor=actor.email))

        return await self._commit_and_notify(task, drafts)

    async def delete_task(self, task_id: int, *, actor: User) -> None:
        """Delete a task; only its creator or an administrator may do so."""
        task = await self.get_task(task_id)
        if task.created_by != actor.email and not actor.is_admin:
            raise PermissionDeniedError("Only the task creator or an administrator can delete it.")
        await self._repository.delete(task)
        await self._session.commit()
        logger.info("Task deleted", extra={"task_id": task_id})


__all__ = ["TaskService"]
