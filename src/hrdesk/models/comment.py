"""Task comment model."""

from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from .common import CreatedAtMixin


class Comment(CreatedAtMixin, table=True):
    """Immutable comment on a task; ``mentions`` holds resolved identity emails."""

    __tablename__ = "comments"
    __table_args__ = (sa.Index("ix_comments_task_id_created_at", "task_id", "created_at"),)

    id: int | None = Field(default=None, primary_key=True)
    task_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    content: str = Field(sa_column=sa.Column(sa.Text(), nullable=False))
    mentions: list[str] = Field(
        default_factory=list,
        sa_column=sa.Column(sa.JSON(), nullable=False, default=list),
    )


__all__ = ["Comment"]
