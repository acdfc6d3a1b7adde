"""Schemas for administrative account removal."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DeleteUsersRequest(BaseModel):
    """Bulk removal request authenticated by the shared admin credential pair."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "userIds": [12, 13],
                "adminUsername": "admin",
                "adminPassword": "********",
            }
        },
    )

    user_ids: list[int] = Field(alias="userIds")
    admin_username: str = Field(default="", alias="adminUsername")
    admin_password: str = Field(default="", alias="adminPassword")


__all__ = ["DeleteUsersRequest"]
