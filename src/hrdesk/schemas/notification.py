"""Notification schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from ..models import NotificationStatus, NotificationType


class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    task_id: int
    title: str
    message: str
    type: NotificationType
    status: NotificationStatus
    created_at: datetime


class NotificationListResponse(BaseModel):
    """Newest-first notifications with the recipient's unread count."""

    items: list[NotificationRead]
    unread: int


class NotificationBulkResult(BaseModel):
    affected: int


__all__ = ["NotificationBulkResult", "NotificationListResponse", "NotificationRead"]
