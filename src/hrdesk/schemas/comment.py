"""Comment schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=10_000)


class CommentAuthor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str | None = None


class CommentRead(BaseModel):
    """A comment together with its author's display fields."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    user_id: int
    content: str
    mentions: list[str] = Field(default_factory=list)
    created_at: datetime
    author: CommentAuthor | None = None

    @classmethod
    def from_row(cls, comment: Any, author: Any | None) -> "CommentRead":
        read = cls.model_validate(comment)
        if author is not None:
            read.author = CommentAuthor.model_validate(author)
        return read


__all__ = ["CommentAuthor", "CommentCreate", "CommentRead"]
