"""Routes exposing background job orchestration."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from ...core.jobs import JobQueueUnavailableError, enqueue_deadline_scan, job_enqueued_at
from ...deps import AdminUserDependency, AllowedIPDependency
from ...schemas import JobEnqueueResponse

router = APIRouter(prefix="/jobs", tags=["jobs"], dependencies=[AllowedIPDependency])


@router.post(
    "/deadline-scan",
    response_model=JobEnqueueResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Queue a scan for tasks with approaching deadlines",
)
async def trigger_deadline_scan(request: Request, admin: AdminUserDependency) -> JobEnqueueResponse:
    try:
        job = enqueue_deadline_scan(request_id=getattr(request.state, "request_id", None))
    except JobQueueUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Background job queue is unavailable.",
        ) from exc
    job_status = job.get_status(refresh=False)
    return JobEnqueueResponse(
        job_id=job.id,
        status=job_status.value if job_status is not None else "queued",
        enqueued_at=job_enqueued_at(job),
    )


__all__ = ["router"]
