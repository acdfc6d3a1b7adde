"""IP decision endpoint and allowlist administration."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from ...deps import (
    AdminUserDependency,
    AllowedIPDependency,
    ClientIPDependency,
    DatabaseSessionDependency,
)
from ...schemas import AllowedIPCreate, AllowedIPRead, FailedLoginRead, IPValidationResponse
from ...services import AccessService, FailedLoginService
from ...services.access import ACCESS_ERROR

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/access", tags=["access"])


@router.get(
    "/validate-ip",
    response_model=IPValidationResponse,
    response_model_exclude_none=True,
    responses={500: {"model": IPValidationResponse}},
    summary="Decide whether the caller's address is allowlisted",
)
async def validate_ip(
    client_ip: ClientIPDependency,
    session: DatabaseSessionDependency,
):
    try:
        decision = await AccessService(session).evaluate(client_ip)
    except Exception as exc:
        logger.exception("IP decision failed", extra={"ip": client_ip})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"allowed": False, "message": ACCESS_ERROR, "details": str(exc), "ip": client_ip},
        )
    if decision.error is not None:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=decision.as_payload(),
        )
    return IPValidationResponse(allowed=decision.allowed, message=decision.message, ip=decision.ip)


@router.get(
    "/allowed-ips",
    response_model=list[AllowedIPRead],
    dependencies=[AllowedIPDependency],
    summary="List allowlisted addresses, newest first",
)
async def list_allowed_ips(
    session: DatabaseSessionDependency,
    admin: AdminUserDependency,
) -> list[AllowedIPRead]:
    entries = await AccessService(session).list_allowed()
    return [AllowedIPRead.model_validate(entry) for entry in entries]


@router.post(
    "/allowed-ips",
    response_model=AllowedIPRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[AllowedIPDependency],
    summary="Allowlist an address",
)
async def create_allowed_ip(
    payload: AllowedIPCreate,
    session: DatabaseSessionDependency,
    admin: AdminUserDependency,
) -> AllowedIPRead:
    entry = await AccessService(session).add_allowed(
        ip_address=payload.ip_address,
        description=payload.description,
        actor=admin,
    )
    return AllowedIPRead.model_validate(entry)


@router.delete(
    "/allowed-ips/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[AllowedIPDependency],
    summary="Remove an address from the allowlist",
)
async def delete_allowed_ip(
    entry_id: int,
    session: DatabaseSessionDependency,
    admin: AdminUserDependency,
) -> Response:
    await AccessService(session).remove_allowed(entry_id, actor=admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/failed-logins",
    response_model=list[FailedLoginRead],
    dependencies=[AllowedIPDependency],
    summary="Review recorded failed sign-in attempts",
)
async def list_failed_logins(
    session: DatabaseSessionDependency,
    admin: AdminUserDependency,
) -> list[FailedLoginRead]:
    attempts = await FailedLoginService(session).list_recent()
    return [FailedLoginRead.model_validate(attempt) for attempt in attempts]


__all__ = ["router"]
