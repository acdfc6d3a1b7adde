"""Recipient-scoped notification routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from ...deps import AllowedIPDependency, CurrentUserDependency, DatabaseSessionDependency
from ...models import NotificationStatus
from ...schemas import NotificationBulkResult, NotificationListResponse, NotificationRead
from ...services import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"], dependencies=[AllowedIPDependency])


@router.get("/", response_model=NotificationListResponse, summary="List my notifications")
async def list_notifications(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    status: Annotated[NotificationStatus | None, Query()] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> NotificationListResponse:
    items, unread = await NotificationService(session).list_for_user(
        current_user.id,
        status=status,
        limit=limit,
    )
    return NotificationListResponse(
        items=[NotificationRead.model_validate(item) for item in items],
        unread=unread,
    )


@router.post(
    "/read-all",
    response_model=NotificationBulkResult,
    summary="Mark all of my unread notifications read",
)
async def mark_all_read(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> NotificationBulkResult:
    updated = await NotificationService(session).mark_all_read(current_user.id)
    return NotificationBulkResult(affected=updated)


@router.post("/{notification_id}/read", response_model=NotificationRead, summary="Mark one read")
async def mark_read(
    notification_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> NotificationRead:
    notification = await NotificationService(session).mark_read(notification_id, current_user.id)
    return NotificationRead.model_validate(notification)


@router.delete("/", response_model=NotificationBulkResult, summary="Delete all of my notifications")
async def delete_all_notifications(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> NotificationBulkResult:
    removed = await NotificationService(session).delete_all(current_user.id)
    return NotificationBulkResult(affected=removed)


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete one notification",
)
async def delete_notification(
    notification_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> Response:
    await NotificationService(session).delete(notification_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
