"""User-facing Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr

from ..models import UserRole


class UserPublic(BaseModel):
    """Public representation of an employee profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    full_name: str | None = None
    position: str | None = None
    role: UserRole


class UserSuggestion(BaseModel):
    """Entry returned by the mention type-ahead search."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str | None = None


__all__ = ["UserPublic", "UserSuggestion"]
