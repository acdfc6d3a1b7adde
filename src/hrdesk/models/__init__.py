"""Domain models exposed for the service."""

from __future__ import annotations

from .access import AllowedIP, FailedLoginAttempt
from .comment import Comment
from .common import CreatedAtMixin, TimestampMixin, ensure_utc, utcnow
from .notification import Notification, NotificationStatus, NotificationType
from .performance import EmployeePerformance
from .task import Task, TaskPriority, TaskStatus, next_status
from .user import User, UserBase, UserRole

__all__ = [
    "AllowedIP",
    "Comment",
    "CreatedAtMixin",
    "EmployeePerformance",
    "FailedLoginAttempt",
    "Notification",
    "NotificationStatus",
    "NotificationType",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TimestampMixin",
    "User",
    "UserBase",
    "UserRole",
    "ensure_utc",
    "next_status",
    "utcnow",
]
