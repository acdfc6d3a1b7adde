"""Notification model."""

from __future__ import annotations

from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field

from .common import CreatedAtMixin, enum_column


class NotificationType(str, Enum):
    DEADLINE = "deadline"
    OVERDUE = "overdue"
    STATUS = "status"
    COMPLETED = "completed"
    ASSIGNMENT = "assignment"
    MENTION = "mention"


class NotificationStatus(str, Enum):
    """Read state; the only transition is ``unread`` to ``read``."""

    UNREAD = "unread"
    READ = "read"


class Notification(CreatedAtMixin, table=True):
    """A message addressed to one recipient about one task."""

    __tablename__ = "notifications"
    __table_args__ = (
        sa.Index("ix_notifications_user_id_status", "user_id", "status"),
        sa.Index("ix_notifications_task_id_type_created_at", "task_id", "type", "created_at"),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    task_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    title: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    message: str = Field(sa_column=sa.Column(sa.Text(), nullable=False))
    type: NotificationType = Field(
        sa_column=enum_column(NotificationType, "notification_type"),
    )
    status: NotificationStatus = Field(
        default=NotificationStatus.UNREAD,
        sa_column=enum_column(
            NotificationStatus,
            "notification_status",
            default=NotificationStatus.UNREAD,
        ),
    )


__all__ = ["Notification", "NotificationStatus", "NotificationType"]
