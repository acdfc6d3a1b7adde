"""Common system-level response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RootResponse(BaseModel):
    """Service metadata returned by ``/api/metadata``."""

    name: str = Field(description="Human-friendly service name")
    environment: str = Field(description="Deployment environment identifier")
    version: str = Field(description="Semantic version of the service")
    api_prefix: str = Field(description="Base path for API routes")


class HealthCheckResponse(BaseModel):
    status: str = Field(default="ok", description="Service health indicator")


class ErrorResponse(BaseModel):
    """Standardised error envelope returned by exception handlers."""

    code: str = Field(description="Machine-readable error identifier")
    message: str = Field(description="Human-readable error message")
    details: Any | None = Field(
        default=None,
        description="Optional structured metadata describing the error context.",
    )


class MessageResponse(BaseModel):
    message: str


class ErrorMessageResponse(BaseModel):
    """Plain ``{"error": ...}`` body used by the auth and admin endpoints."""

    error: str
    details: list[str] | None = None


__all__ = [
    "ErrorMessageResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "MessageResponse",
    "RootResponse",
]
