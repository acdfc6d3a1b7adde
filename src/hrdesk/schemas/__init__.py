"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .access import AllowedIPCreate, AllowedIPRead, FailedLoginRead, IPValidationResponse
from .admin import DeleteUsersRequest
from .auth import (
    AuthResponse,
    AuthTokens,
    FailedLoginRequest,
    SignupRequest,
    TokenPayload,
)
from .comment import CommentAuthor, CommentCreate, CommentRead
from .jobs import JobEnqueueResponse
from .notification import NotificationBulkResult, NotificationListResponse, NotificationRead
from .system import (
    ErrorMessageResponse,
    ErrorResponse,
    HealthCheckResponse,
    MessageResponse,
    RootResponse,
)
from .task import TaskCreate, TaskListResponse, TaskRead, TaskUpdate
from .user import UserPublic, UserSuggestion

__all__ = [
    "AllowedIPCreate",
    "AllowedIPRead",
    "AuthResponse",
    "AuthTokens",
    "CommentAuthor",
    "CommentCreate",
    "CommentRead",
    "DeleteUsersRequest",
    "ErrorMessageResponse",
    "ErrorResponse",
    "FailedLoginRead",
    "FailedLoginRequest",
    "HealthCheckResponse",
    "IPValidationResponse",
    "JobEnqueueResponse",
    "MessageResponse",
    "NotificationBulkResult",
    "NotificationListResponse",
    "NotificationRead",
    "RootResponse",
    "SignupRequest",
    "TaskCreate",
    "TaskListResponse",
    "TaskRead",
    "TaskUpdate",
    "TokenPayload",
    "UserPublic",
    "UserSuggestion",
]
