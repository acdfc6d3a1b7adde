"""Employee directory routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from ...deps import AllowedIPDependency, CurrentUserDependency, DatabaseSessionDependency
from ...schemas import UserPublic, UserSuggestion
from ...services import UserService
from ...services.mentions import active_mention_prefix

router = APIRouter(prefix="/users", tags=["users"], dependencies=[AllowedIPDependency])


@router.get("/me", response_model=UserPublic, summary="Return the authenticated user")
async def read_current_user(current_user: CurrentUserDependency) -> UserPublic:
    return UserPublic.model_validate(current_user)


@router.get(
    "/search",
    response_model=list[UserSuggestion],
    summary="Mention type-ahead over the directory",
)
async def search_users(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    q: Annotated[str | None, Query(max_length=255, description="Full-name prefix.")] = None,
    text: Annotated[
        str | None,
        Query(max_length=10_000, description="Composer text; the active @prefix is used."),
    ] = None,
    cursor: Annotated[int | None, Query(ge=0, description="Cursor offset within text.")] = None,
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
) -> list[UserSuggestion]:
    prefix = q
    if prefix is None and text is not None:
        prefix = active_mention_prefix(text, cursor)
    users = await UserService(session).search_directory(prefix or "", limit=limit)
    return [UserSuggestion.model_validate(user) for user in users]


__all__ = ["router"]
