"""Repository for task comments."""

from __future__ import annotations

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Comment, User
from .base import BaseRepository


class CommentRepository(BaseRepository[Comment]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Comment)

    async def list_for_task_with_authors(self, task_id: int) -> list[tuple[Comment, User | None]]:
        """Return a task's comments newest first, each paired with its author."""
        query = (
            select(Comment, User)
            .join(User, User.id == Comment.user_id, isouter=True)
            .where(Comment.task_id == task_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        result = await self.session.execute(query)
        return [(comment, author) for comment, author in result.all()]
