"""Server-sent event streams of reconciled task, comment and notification lists."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from ...deps import (
    AllowedIPDependency,
    CurrentUserDependency,
    DatabaseSessionDependency,
    SessionFactoryDependency,
    SettingsDependency,
)
from ...errors import NotFoundError
from ...realtime import ReconciledView
from ...schemas import CommentRead, NotificationRead, TaskRead
from ...services import CommentService, NotificationService, TaskService

router = APIRouter(prefix="/realtime", tags=["realtime"], dependencies=[AllowedIPDependency])

STREAM_LIMIT = 100


def _snapshot_frame(name: str, version: int, items: list[BaseModel]) -> str:
    payload = json.dumps({"version": version, "items": [item.model_dump(mode="json") for item in items]})
    return f"id: {version}\nevent: {name}\ndata: {payload}\n\n"


def _stream(
    request: Request,
    *,
    name: str,
    collection: str,
    loader: Callable[[], Awaitable[list[Any]]],
    heartbeat_seconds: float,
    task_id: int | None = None,
) -> StreamingResponse:
    changed: asyncio.Queue[None] = asyncio.Queue()
    view: ReconciledView[Any] = ReconciledView(
        loader,
        collection=collection,
        task_id=task_id,
        on_change=lambda _items: changed.put_nowait(None),
    )

    async def event_source() -> AsyncIterator[str]:
        await view.open()
        try:
            while True:
                while not changed.empty():
                    changed.get_nowait()
                yield _snapshot_frame(name, view.version, view.items)
                while True:
                    if await request.is_disconnected():
                        return
                    try:
                        await asyncio.wait_for(changed.get(), timeout=heartbeat_seconds)
                    except asyncio.TimeoutError:
                        yield "event: heartbeat\ndata: {}\n\n"
                        continue
                    break
        finally:
            await view.close()

    response = StreamingResponse(event_source(), media_type="text/event-stream")
    response.headers["Cache-Control"] = "no-store"
    response.headers["Connection"] = "keep-alive"
    response.headers["X-Accel-Buffering"] = "no"
    return response


@router.get("/notifications", summary="Stream my notifications as they change")
async def stream_notifications(
    request: Request,
    current_user: CurrentUserDependency,
    session_factory: SessionFactoryDependency,
    settings: SettingsDependency,
) -> StreamingResponse:
    user_id = current_user.id

    async def load() -> list[NotificationRead]:
        async with session_factory() as session:
            items, _ = await NotificationService(session).list_for_user(user_id, limit=STREAM_LIMIT)
            return [NotificationRead.model_validate(item) for item in items]

    return _stream(
        request,
        name="notifications",
        collection="notifications",
        loader=load,
        heartbeat_seconds=settings.sse_heartbeat_seconds,
    )


@router.get("/tasks", summary="Stream my tasks as they change")
async def stream_tasks(
    request: Request,
    current_user: CurrentUserDependency,
    session_factory: SessionFactoryDependency,
    settings: SettingsDependency,
) -> StreamingResponse:
    identity = None if current_user.is_admin else current_user.email

    async def load() -> list[TaskRead]:
        async with session_factory() as session:
            tasks, _ = await TaskService(session).list_tasks(identity=identity, limit=STREAM_LIMIT)
            return [TaskRead.model_validate(task) for task in tasks]

    return _stream(
        request,
        name="tasks",
        collection="tasks",
        loader=load,
        heartbeat_seconds=settings.sse_heartbeat_seconds,
    )


@router.get("/tasks/{task_id}/comments", summary="Stream a task's comments as they change")
async def stream_task_comments(
    task_id: int,
    request: Request,
    current_user: CurrentUserDependency,
    session: DatabaseSessionDependency,
    session_factory: SessionFactoryDependency,
    settings: SettingsDependency,
) -> StreamingResponse:
    await TaskService(session).get_task(task_id)

    async def load() -> list[CommentRead]:
        async with session_factory() as stream_session:
            try:
                rows = await CommentService(stream_session).list_comments(task_id)
            except NotFoundError:
                return []
            return [CommentRead.from_row(comment, author) for comment, author in rows[:STREAM_LIMIT]]

    return _stream(
        request,
        name="comments",
        collection="comments",
        loader=load,
        heartbeat_seconds=settings.sse_heartbeat_seconds,
        task_id=task_id,
    )


__all__ = ["router"]
