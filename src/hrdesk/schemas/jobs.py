"""Schemas describing background job submissions."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class JobEnqueueResponse(BaseModel):
    """Acknowledgement returned when a job is queued."""

    job_id: str = Field(description="Identifier of the enqueued job")
    status: str = Field(description="Initial job status reported by the queue")
    enqueued_at: datetime = Field(description="Timestamp when the job was enqueued")


__all__ = ["JobEnqueueResponse"]
