"""Repository for notifications."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Notification, NotificationStatus, NotificationType
from .base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Notification)

    async def list_for_user(
        self,
        user_id: int,
        *,
        status: NotificationStatus | None = None,
        limit: int = 50,
    ) -> list[Notification]:
        """Return the recipient's notifications, newest first."""
        query = select(Notification).where(Notification.user_id == user_id)
        if status is not None:
            query = query.where(Notification.status == status)
        query = (
            query
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_unread(self, user_id: int) -> int:
        query = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.status == NotificationStatus.UNREAD)
        )
        result = await self.session.execute(query)
        return int(result.scalar_one())

    async def mark_all_read(self, user_id: int) -> int:
        statement = (
            update(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.status == NotificationStatus.UNREAD)
            .values(status=NotificationStatus.READ)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(statement)
        return int(result.rowcount or 0)

    async def delete_for_user(self, user_id: int) -> int:
        statement = (
            delete(Notification)
            .where(Notification.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(statement)
        return int(result.rowcount or 0)

    async def exists_since(
        self,
        *,
        task_id: int,
        type_: NotificationType,
        since: datetime,
    ) -> bool:
        """Return ``True`` if a notification of ``type_`` exists for the task since ``since``."""
        query = (
            select(Notification.id)
            .where(Notification.task_id == task_id)
            .where(Notification.type == type_)
            .where(Notification.created_at >= since)
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.first() is not None
