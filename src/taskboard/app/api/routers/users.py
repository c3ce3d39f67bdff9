"""Routes exposing the authenticated user."""

from __future__ import annotations

from fastapi import APIRouter

from ...deps import CurrentUserDependency
from ...schemas import ApiResponse, UserPublic

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=ApiResponse[UserPublic], summary="Return the current user")
async def read_current_user(current_user: CurrentUserDependency) -> ApiResponse[UserPublic]:
    return ApiResponse[UserPublic](success=True, data=UserPublic.model_validate(current_user))
