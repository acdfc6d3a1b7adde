"""Routes for task comments."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import AllowedIPDependency, CurrentUserDependency, DatabaseSessionDependency
from ...schemas import CommentCreate, CommentRead
from ...services import CommentService

router = APIRouter(prefix="/tasks/{task_id}/comments", tags=["comments"], dependencies=[AllowedIPDependency])


@router.get("/", response_model=list[CommentRead], summary="List a task's comments, newest first")
async def list_comments(
    task_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> list[CommentRead]:
    rows = await CommentService(session).list_comments(task_id)
    return [CommentRead.from_row(comment, author) for comment, author in rows]


@router.post(
    "/",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Post a comment and notify mentioned users",
)
async def post_comment(
    task_id: int,
    payload: CommentCreate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> CommentRead:
    comment = await CommentService(session).post_comment(
        task_id,
        actor=current_user,
        content=payload.content,
    )
    return CommentRead.from_row(comment, current_user)


__all__ = ["router"]
