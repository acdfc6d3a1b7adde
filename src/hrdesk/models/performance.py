"""Employee performance records."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import utcnow


class EmployeePerformance(SQLModel, table=True):
    __tablename__ = "employee_performance"

    id: int | None = Field(default=None, primary_key=True)
    employee_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    metric_name: str = Field(
        max_length=120,
        sa_column=sa.Column(sa.String(length=120), nullable=False),
    )
    metric_value: float = Field(sa_column=sa.Column(sa.Float(), nullable=False))
    notes: str | None = Field(default=None, sa_column=sa.Column(sa.Text(), nullable=True))
    recorded_at: datetime = Field(
        default_factory=utcnow,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


__all__ = ["EmployeePerformance"]
