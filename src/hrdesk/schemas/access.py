"""Schemas for the IP access gate, the allowlist and failed-login reports."""

from __future__ import annotations

import ipaddress
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IPValidationResponse(BaseModel):
    """Decision returned by ``/api/access/validate-ip``."""

    allowed: bool
    message: str
    ip: str | None = None
    details: Any | None = None


class AllowedIPCreate(BaseModel):
    ip_address: str = Field(min_length=1, max_length=45)
    description: str | None = Field(default=None, max_length=255)

    @field_validator("ip_address")
    @classmethod
    def _validate_ip(cls, value: str) -> str:
        candidate = value.strip()
        try:
            ipaddress.ip_address(candidate)
        except ValueError as exc:
            raise ValueError("ip_address must be a valid IPv4 or IPv6 address") from exc
        return candidate


class AllowedIPRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ip_address: str
    description: str | None = None
    created_by: int | None = None
    created_at: datetime


class FailedLoginRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    ip_address: str | None = None
    attempt_count: int
    last_attempt: datetime
    created_at: datetime


__all__ = [
    "AllowedIPCreate",
    "AllowedIPRead",
    "FailedLoginRead",
    "IPValidationResponse",
]
