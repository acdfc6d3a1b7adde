"""Task-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from ..models import TaskPriority, TaskStatus

TASK_READ_EXAMPLE = {
    "id": 1,
    "title": "Prepare onboarding pack",
    "deadline": "2024-03-01T17:00:00Z",
    "priority": TaskPriority.HIGH.value,
    "status": TaskStatus.PENDING.value,
    "created_by": "lead@example.com",
    "assigned_to": "new.hire@example.com",
    "user_id": 7,
    "created_at": "2024-02-20T09:00:00Z",
    "updated_at": "2024-02-20T09:00:00Z",
}


class TaskCreate(BaseModel):
    """Payload for creating a new task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Prepare onboarding pack",
                "deadline": "2024-03-01T17:00:00Z",
                "priority": TaskPriority.HIGH.value,
                "assigned_to": "new.hire@example.com",
            }
        }
    )

    title: str = Field(min_length=1, max_length=255)
    deadline: datetime
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    assigned_to: EmailStr


class TaskUpdate(BaseModel):
    """Partial update; ``status`` must be the next step of the cycle."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "assigned_to": "teammate@example.com",
                "status": TaskStatus.IN_PROGRESS.value,
            }
        }
    )

    title: str | None = Field(default=None, min_length=1, max_length=255)
    deadline: datetime | None = Field(default=None)
    priority: TaskPriority | None = Field(default=None)
    assigned_to: EmailStr | None = Field(default=None)
    status: TaskStatus | None = Field(default=None)

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "TaskUpdate":
        if not self.model_dump(exclude_unset=True, exclude_none=True):
            raise ValueError("At least one field must be provided for update.")
        return self


class TaskRead(BaseModel):
    """Public representation of a task."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": TASK_READ_EXAMPLE},
    )

    id: int
    title: str
    deadline: datetime
    priority: TaskPriority
    status: TaskStatus
    created_by: str
    assigned_to: str
    user_id: int
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    items: list[TaskRead]
    total: int
    limit: int
    offset: int


__all__ = ["TaskCreate", "TaskListResponse", "TaskRead", "TaskUpdate"]
