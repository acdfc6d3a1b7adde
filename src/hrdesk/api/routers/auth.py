"""Routes handling sign-up, sign-in and failed sign-in reports."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm

from ...core.config import Settings
from ...core.context import REAL_IP_HEADER
from ...deps import ClientIPDependency, DatabaseSessionDependency, SettingsDependency
from ...errors import AuthenticationError
from ...models import User
from ...schemas import (
    AuthResponse,
    AuthTokens,
    ErrorMessageResponse,
    FailedLoginRequest,
    MessageResponse,
    SignupRequest,
    UserPublic,
)
from ...services import AuthService, FailedLoginService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

FAILED_LOGIN_LOGGED = "Failed login attempt logged successfully"


def _build_response(service: AuthService, user: User, settings: Settings) -> AuthResponse:
    token = service.issue_token(user)
    return AuthResponse(
        user=UserPublic.model_validate(user),
        tokens=AuthTokens(
            access_token=token.token,
            expires_in=settings.access_token_expire_minutes * 60,
        ),
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new employee account",
)
async def signup(
    payload: SignupRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> AuthResponse:
    service = AuthService(session, settings)
    user = await service.register_user(
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        position=payload.position,
    )
    return _build_response(service, user, settings)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate using email and password",
)
async def login(
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    client_ip: ClientIPDependency,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
) -> AuthResponse:
    service = AuthService(session, settings)
    user = await service.authenticate_user(form_data.username, form_data.password)
    if user is None:
        try:
            await FailedLoginService(session).record(form_data.username, client_ip)
        except Exception:
            await session.rollback()
            logger.exception("Failed to record failed login", extra={"email": form_data.username})
        raise AuthenticationError("Incorrect email or password.", code="invalid_credentials")
    return _build_response(service, user, settings)


@router.post(
    "/failed-login",
    response_model=MessageResponse,
    responses={500: {"model": ErrorMessageResponse}},
    summary="Record an invalid-credential sign-in attempt",
)
async def report_failed_login(
    payload: FailedLoginRequest,
    request: Request,
    session: DatabaseSessionDependency,
):
    ip_address = payload.ip_address or request.headers.get(REAL_IP_HEADER)
    try:
        await FailedLoginService(session).record(payload.email, ip_address)
    except Exception as exc:
        await session.rollback()
        logger.exception("Failed to record failed login", extra={"email": payload.email})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )
    return MessageResponse(message=FAILED_LOGIN_LOGGED)


__all__ = ["router"]
