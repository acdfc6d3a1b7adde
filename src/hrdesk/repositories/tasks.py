"""Repository for interacting with task persistence models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Task, TaskPriority, TaskStatus
from .base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """Concrete repository encapsulating ``Task`` persistence operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Task)

    async def list_paginated(
        self,
        *,
        identity: str | None = None,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Task], int]:
        """Return tasks matching the filters along with the total count.

        ``identity`` restricts results to tasks created by or assigned to
        that email.
        """
        conditions = []
        if identity is not None:
            conditions.append(or_(Task.created_by == identity, Task.assigned_to == identity))
        if status is not None:
            conditions.append(Task.status == status)
        if priority is not None:
            conditions.append(Task.priority == priority)
        if search:
            needle = search.lower()
            conditions.append(
                or_(
                    func.lower(Task.title).contains(needle, autoescape=True),
                    func.lower(Task.created_by).contains(needle, autoescape=True),
                    func.lower(Task.assigned_to).contains(needle, autoescape=True),
                )
            )

        query = select(Task).where(*conditions).order_by(Task.deadline, Task.id)
        count_query = select(func.count()).select_from(Task).where(*conditions)
        result = await self.session.execute(query.limit(limit).offset(offset))
        tasks = list(result.scalars().all())
        total_result = await self.session.execute(count_query)
        return tasks, int(total_result.scalar_one())

    async def list_open_due_before(self, cutoff: datetime) -> list[Task]:
        """Return unfinished tasks whose deadline falls before ``cutoff``."""
        query = (
            select(Task)
            .where(Task.status != TaskStatus.COMPLETED)
            .where(Task.deadline <= cutoff)
            .order_by(Task.deadline, Task.id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
