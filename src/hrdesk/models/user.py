"""Employee directory models built with SQLModel."""

from __future__ import annotations

from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin, enum_column


class UserRole(str, Enum):
    """Roles supported by the authorisation layer."""

    USER = "user"
    ADMIN = "admin"


class UserBase(SQLModel, table=False):
    """Shared attributes for user models."""

    email: str = Field(
        max_length=320,
        sa_column=sa.Column(sa.String(length=320), nullable=False, unique=True),
    )
    full_name: str | None = Field(
        default=None,
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=True),
    )
    position: str | None = Field(
        default=None,
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=True),
    )
    is_active: bool = Field(
        default=True,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    role: UserRole = Field(
        default=UserRole.USER,
        sa_column=enum_column(UserRole, "user_role", default=UserRole.USER),
    )


class User(UserBase, TimestampMixin, table=True):
    """An employee profile; ``email`` is the identity used by tasks and mentions."""

    __tablename__ = "users"
    __table_args__ = (sa.Index("ix_users_full_name", "full_name"),)

    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


__all__ = ["User", "UserBase", "UserRole"]
