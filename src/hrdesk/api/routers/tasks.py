"""Routes handling the task lifecycle."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from ...deps import AllowedIPDependency, CurrentUserDependency, DatabaseSessionDependency
from ...models import TaskPriority, TaskStatus
from ...schemas import TaskCreate, TaskListResponse, TaskRead, TaskUpdate
from ...services import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"], dependencies=[AllowedIPDependency])

LimitQuery = Annotated[int, Query(ge=1, le=100, description="Maximum number of tasks to return.")]
OffsetQuery = Annotated[int, Query(ge=0, description="Number of tasks to skip.")]
StatusQuery = Annotated[TaskStatus | None, Query(description="Only tasks in this status.")]
PriorityQuery = Annotated[TaskPriority | None, Query(description="Only tasks with this priority.")]
IdentityQuery = Annotated[
    str | None,
    Query(description="Only tasks created by or assigned to this email."),
]
SearchQuery = Annotated[
    str | None,
    Query(max_length=255, description="Case-insensitive text matched against title, creator and assignee."),
]


@router.get("/", response_model=TaskListResponse, summary="List tasks")
async def list_tasks(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    limit: LimitQuery = 20,
    offset: OffsetQuery = 0,
    status: StatusQuery = None,
    priority: PriorityQuery = None,
    identity: IdentityQuery = None,
    search: SearchQuery = None,
) -> TaskListResponse:
    tasks, total = await TaskService(session).list_tasks(
        identity=identity,
        status=status,
        priority=priority,
        search=search,
        limit=limit,
        offset=offset,
    )
    return TaskListResponse(
        items=[TaskRead.model_validate(task) for task in tasks],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post(
    "/",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task and notify its assignee",
)
async def create_task(
    payload: TaskCreate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> TaskRead:
    task = await TaskService(session).create_task(
        actor=current_user,
        title=payload.title,
        deadline=payload.deadline,
        priority=payload.priority,
        assigned_to=payload.assigned_to,
    )
    return TaskRead.model_validate(task)


@router.get("/{task_id}", response_model=TaskRead, summary="Retrieve a task")
async def get_task(
    task_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> TaskRead:
    return TaskRead.model_validate(await TaskService(session).get_task(task_id))


@router.patch("/{task_id}", response_model=TaskRead, summary="Partially update a task")
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> TaskRead:
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    task = await TaskService(session).update_task(task_id, actor=current_user, **updates)
    return TaskRead.model_validate(task)


@router.post(
    "/{task_id}/advance",
    response_model=TaskRead,
    summary="Advance a task to the next status in its cycle",
)
async def advance_task(
    task_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> TaskRead:
    task = await TaskService(session).advance_status(task_id, actor=current_user)
    return TaskRead.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a task")
async def delete_task(
    task_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> Response:
    await TaskService(session).delete_task(task_id, actor=current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
