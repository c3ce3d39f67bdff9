"""Routes handling signup and password login."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from ...deps import DatabaseSessionDependency, SettingsDependency
from ...errors import UnauthorizedError
from ...schemas import ApiResponse, AuthResponse, SignupRequest
from ...services import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def signup(
    payload: SignupRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> ApiResponse[AuthResponse]:
    service = AuthService(session, settings)
    user = await service.register_user(email=payload.email, password=payload.password, name=payload.name)
    logger.info("User registered", extra={"user_id": user.id})
    return ApiResponse[AuthResponse](
        success=True,
        data=AuthResponse.issue(user, service.issue_token(user)),
        message="Account created successfully",
    )


@router.post(
    "/login",
    response_model=ApiResponse[AuthResponse],
    summary="Authenticate using email and password",
)
async def login(
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> ApiResponse[AuthResponse]:
    service = AuthService(session, settings)
    user = await service.authenticate_user(form_data.username, form_data.password)
    if user is None:
        raise UnauthorizedError("Incorrect email or password.")
    return ApiResponse[AuthResponse](success=True, data=AuthResponse.issue(user, service.issue_token(user)))


__all__ = ["router"]
