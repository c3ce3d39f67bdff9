"""Registration, credential checks and session token issuance."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings
from ..core.security import SessionToken, create_session_token, verify_password
from ..errors import ForbiddenError, ServerError
from ..models import User
from .users import UserService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._settings = settings
        self._users = UserService(session)

    async def register_user(self, *, email: str, password: str, name: str | None = None) -> User:
        return await self._users.create_user(email=email, password=password, name=name)

    async def authenticate_user(self, email: str, password: str) -> User | None:
        """Return the user for valid credentials, ``None`` otherwise.

        A deactivated account with the right password is refused outright
        rather than reported as a bad password.
        """
        user = await self._users.get_user_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("Login rejected", extra={"reason": "credentials"})
            return None
        if not user.is_active:
            logger.warning("Login rejected", extra={"reason": "inactive", "user_id": user.id})
            raise ForbiddenError("User account is inactive.")
        return user

    def issue_token(self, user: User) -> SessionToken:
        if user.id is None:
            raise ServerError("User must be persisted before issuing tokens.")
        return create_session_token(subject=user.id, settings=self._settings)


__all__ = ["AuthService"]
