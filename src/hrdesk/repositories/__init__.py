"""Database repositories for encapsulating persistence logic."""

from __future__ import annotations

from .access import AllowedIPRepository, FailedLoginRepository
from .comments import CommentRepository
from .notifications import NotificationRepository
from .tasks import TaskRepository
from .users import UserRepository

__all__ = [
    "AllowedIPRepository",
    "CommentRepository",
    "FailedLoginRepository",
    "NotificationRepository",
    "TaskRepository",
    "UserRepository",
]
