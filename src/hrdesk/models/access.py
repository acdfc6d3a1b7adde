"""IP allowlist and failed-login tracking models."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from .common import CreatedAtMixin, utcnow


class AllowedIP(CreatedAtMixin, table=True):
    """An exact address string permitted through the IP access gate."""

    __tablename__ = "allowed_ips"

    id: int | None = Field(default=None, primary_key=True)
    ip_address: str = Field(
        max_length=45,
        sa_column=sa.Column(sa.String(length=45), nullable=False, unique=True),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=255), nullable=True),
    )
    created_by: int | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )


class FailedLoginAttempt(CreatedAtMixin, table=True):
    """Accumulated invalid-credential sign-ins for one email."""

    __tablename__ = "failed_login_attempts"

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(
        max_length=320,
        sa_column=sa.Column(sa.String(length=320), nullable=False, unique=True),
    )
    ip_address: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=45), nullable=True),
    )
    attempt_count: int = Field(
        default=1,
        sa_column=sa.Column(sa.Integer(), nullable=False, server_default="1"),
    )
    last_attempt: datetime = Field(
        default_factory=utcnow,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


__all__ = ["AllowedIP", "FailedLoginAttempt"]
