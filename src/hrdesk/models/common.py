"""Shared model mixins and utilities."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps (as returned by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def enum_column(enum_type: type[Enum], name: str, *, default: Enum | None = None) -> sa.Column:
    """Build a non-native enum column persisting member values rather than names."""
    return sa.Column(
        sa.Enum(
            enum_type,
            name=name,
            native_enum=False,
            validate_strings=True,
            length=20,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
        server_default=default.value if default is not None else None,
    )


class CreatedAtMixin(SQLModel, table=False):
    """Mixin providing an immutable creation timestamp."""

    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now()},
    )


class TimestampMixin(CreatedAtMixin, table=False):
    """Mixin that provides created/updated timestamp columns."""

    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={
            "server_default": sa.func.now(),
            "onupdate": utcnow,
        },
    )


__all__ = ["CreatedAtMixin", "TimestampMixin", "ensure_utc", "enum_column", "utcnow"]
