"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings, get_settings
from .core.context import bind_actor
from .core.rate_limit import RateLimiter
from .core.security import decode_session_token
from .db.session import get_session
from .errors import RateLimitedError, UnauthorizedError
from .models import User
from .repositories import UserRepository
from .schemas.auth import TokenPayload

SettingsDependency = Annotated[Settings, Depends(get_settings)]

_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""

    async for session in get_session():
        yield session


DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]


def _decode_token(token: str, settings: Settings) -> TokenPayload:
    try:
        return TokenPayload.model_validate(decode_session_token(token, settings))
    except (JWTError, PydanticValidationError) as exc:
        raise UnauthorizedError("Invalid or expired session.") from exc


async def get_current_user(
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    token: str | None = Depends(_oauth2_scheme),
) -> User:
    """Resolve the session user, rejecting the request before any entity access."""

    if not token:
        raise UnauthorizedError()
    payload = _decode_token(token, settings)
    try:
        user_id = int(payload.sub)
    except ValueError as exc:
        raise UnauthorizedError("Invalid or expired session.") from exc
    user = await UserRepository(session).get_active(user_id)
    if user is None:
        raise UnauthorizedError("Invalid or expired session.")
    bind_actor(user.id)
    return user


CurrentUserDependency = Annotated[User, Depends(get_current_user)]


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


async def enforce_rate_limit(
    request: Request,
    current_user: CurrentUserDependency,
    settings: SettingsDependency,
) -> None:
    """Count the request against the caller's budget when limiting is enabled."""

    if not settings.rate_limit_enabled:
        return
    limiter = get_rate_limiter(request)
    decision = await limiter.hit(f"user:{current_user.id}")
    if not decision.allowed:
        raise RateLimitedError(headers={"Retry-After": str(decision.retry_after)})


RateLimitDependency = Depends(enforce_rate_limit)


def require_user_id(user: User) -> int:
    if user.id is None:  # pragma: no cover - persisted users always have ids
        raise UnauthorizedError()
    return user.id


__all__ = [
    "CurrentUserDependency",
    "DatabaseSessionDependency",
    "RateLimitDependency",
    "SettingsDependency",
    "enforce_rate_limit",
    "get_current_user",
    "get_db_session",
    "get_rate_limiter",
    "require_user_id",
]
