"""Administrative bulk account removal.

Access is controlled by a shared username/password pair from settings,
compared by exact match. This mirrors the existing behaviour and is not a
substitute for role-based authorisation.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ...core.security import admin_secret_matches
from ...deps import DatabaseSessionDependency, SettingsDependency
from ...schemas import DeleteUsersRequest, ErrorMessageResponse, MessageResponse
from ...services import AccountRemovalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/delete-users",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorMessageResponse},
        401: {"model": ErrorMessageResponse},
        500: {"model": ErrorMessageResponse},
    },
    summary="Remove accounts and every record referencing them",
)
async def delete_users(
    payload: DeleteUsersRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
):
    if not admin_secret_matches(payload.admin_username, payload.admin_password, settings):
        logger.warning("Rejected account removal with invalid admin credentials")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": "Invalid admin credentials"},
        )

    try:
        report = await AccountRemovalService(session).remove_users(payload.user_ids)
    except Exception:
        logger.exception("Account removal aborted")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    if not report.ok:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Some users could not be deleted", "details": report.errors},
        )
    return MessageResponse(message="Users deleted successfully")


__all__ = ["router"]
