"""Account creation and lookup."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.security import get_password_hash
from ..errors import DuplicateRecordError
from ..models import User
from ..repositories import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = UserRepository(session)

    async def create_user(
        self,
        *,
        email: str,
        password: str,
        name: str | None = None,
        image: str | None = None,
    ) -> User:
        """Persist an account; emails are stored lower-cased and must be unique."""
        normalised = email.strip().lower()
        if await self._repository.get_by_email(normalised) is not None:
            raise DuplicateRecordError("Email is already registered.")
        user = await self._repository.add(
            User(email=normalised, name=name, image=image, hashed_password=get_password_hash(password))
        )
        await self._session.commit()
        logger.info("User created", extra={"user_id": user.id})
        return user

    async def get_user_by_email(self, email: str) -> User | None:
        return await self._repository.get_by_email(email)


__all__ = ["UserService"]
