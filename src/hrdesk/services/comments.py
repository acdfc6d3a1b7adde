"""Comment posting with mention notifications."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models import Comment, Task, User
from ..repositories import CommentRepository, TaskRepository
from .mentions import extract_mentions
from .notifications import NotificationDispatcher, mention_drafts

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = CommentRepository(session)
        self._tasks = TaskRepository(session)
        self._dispatcher = NotificationDispatcher(session)

    async def _get_task(self, task_id: int) -> Task:
        task = await self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task not found.", details={"task_id": task_id})
        return task

    async def list_comments(self, task_id: int) -> list[tuple[Comment, User | None]]:
        await self._get_task(task_id)
        return await self._repository.list_for_task_with_authors(task_id)

    async def post_comment(self, task_id: int, *, actor: User, content: str) -> Comment:
        """Persist a comment and notify every known user it mentions.

        ``mentions`` is recomputed from the submitted text; unknown addresses
        are stored on the comment but produce no notification.
        """
        if not content.strip():
            raise ValidationError("Comment content cannot be empty.")
        task = await self._get_task(task_id)
        mentions = extract_mentions(content)
        comment = Comment(task_id=task.id, user_id=actor.id, content=content, mentions=mentions)
        await self._repository.add(comment)
        await self._session.commit()
        await self._repository.refresh(comment)
        logger.info(
            "Comment posted",
            extra={"task_id": task.id, "comment_id": comment.id, "mentions": len(mentions)},
        )

        drafts = mention_drafts(task, actor=actor.email, mentioned=mentions)
        await self._dispatcher.dispatch(drafts, keep=(comment, task, actor))
        return comment


__all__ = ["CommentService"]
