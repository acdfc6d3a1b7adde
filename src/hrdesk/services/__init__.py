"""Domain service layer package."""

from __future__ import annotations

from .access import AccessDecision, AccessService
from .accounts import AccountRemovalService, RemovalReport
from .auth import AuthService
from .comments import CommentService
from .failed_logins import FailedLoginService
from .notifications import NotificationDispatcher, NotificationService
from .tasks import TaskService
from .users import UserService

__all__ = [
    "AccessDecision",
    "AccessService",
    "AccountRemovalService",
    "AuthService",
    "CommentService",
    "FailedLoginService",
    "NotificationDispatcher",
    "NotificationService",
    "RemovalReport",
    "TaskService",
    "UserService",
]
