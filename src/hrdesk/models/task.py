"""Task domain models and the status cycle."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field

from .common import TimestampMixin, enum_column


class TaskStatus(str, Enum):
    """Task states; they advance one step at a time around a closed cycle."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


_STATUS_CYCLE: dict[TaskStatus, TaskStatus] = {
    TaskStatus.PENDING: TaskStatus.IN_PROGRESS,
    TaskStatus.IN_PROGRESS: TaskStatus.COMPLETED,
    TaskStatus.COMPLETED: TaskStatus.PENDING,
}


def next_status(current: TaskStatus) -> TaskStatus:
    """Return the only status reachable from ``current``."""
    return _STATUS_CYCLE[TaskStatus(current)]


class Task(TimestampMixin, table=True):
    """Persistent task; ``created_by`` and ``assigned_to`` hold identity emails."""

    __tablename__ = "tasks"
    __table_args__ = (
        sa.CheckConstraint("length(title) > 0", name="ck_tasks_title_length"),
        sa.Index("ix_tasks_assigned_to", "assigned_to"),
        sa.Index("ix_tasks_created_by", "created_by"),
        sa.Index("ix_tasks_status_deadline", "status", "deadline"),
    )

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    deadline: datetime = Field(
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=False),
    )
    priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        sa_column=enum_column(TaskPriority, "task_priority", default=TaskPriority.MEDIUM),
    )
    status: TaskStatus = Field(
        default=TaskStatus.PENDING,
        sa_column=enum_column(TaskStatus, "task_status", default=TaskStatus.PENDING),
    )
    created_by: str = Field(
        max_length=320,
        sa_column=sa.Column(sa.String(length=320), nullable=False),
    )
    assigned_to: str = Field(
        max_length=320,
        sa_column=sa.Column(sa.String(length=320), nullable=False),
    )
    user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )


__all__ = ["Task", "TaskPriority", "TaskStatus", "next_status"]
