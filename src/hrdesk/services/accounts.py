"""Administrative bulk removal of employee accounts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from sqlalchemy import delete, or_
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Comment, EmployeePerformance, Notification, Task
from ..repositories import UserRepository

logger = logging.getLogger(__name__)


class AccountRemovalError(Exception):
    """A single account could not be removed."""


@dataclass(slots=True)
class RemovalReport:
    removed: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class AccountRemovalService:
    """Remove accounts and everything that references them.

    Each account is removed in its own transaction: notifications, tasks the
    user created or is assigned to, performance records, comments, then the
    user. A failure rolls back only that account and is reported by id;
    accounts already removed stay removed.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._users = UserRepository(session)

    async def remove_users(self, user_ids: Sequence[int]) -> RemovalReport:
        report = RemovalReport()
        for user_id in user_ids:
            try:
                await self._remove_one(user_id)
            except Exception as exc:
                await self._session.rollback()
                logger.error(
                    "Failed to delete user",
                    extra={"user_id": user_id, "error": str(exc)},
                )
                report.errors.append(f"Failed to delete user {user_id}: {exc}")
            else:
                report.removed.append(user_id)
                logger.info("User deleted", extra={"user_id": user_id})
        return report

    async def _remove_one(self, user_id: int) -> None:
        user = await self._users.get(user_id)
        if user is None:
            raise AccountRemovalError("User not found")
        email = user.email
        statements = (
            delete(Notification).where(Notification.user_id == user_id),
            delete(Task).where(or_(Task.created_by == email, Task.assigned_to == email)),
            delete(EmployeePerformance).where(EmployeePerformance.employee_id == user_id),
            delete(Comment).where(Comment.user_id == user_id),
        )
        for statement in statements:
            await self._session.execute(statement.execution_options(synchronize_session="fetch"))
        await self._users.delete(user)
        await self._session.commit()


__all__ = ["AccountRemovalError", "AccountRemovalService", "RemovalReport"]
