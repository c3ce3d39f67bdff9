"""Repository for user accounts."""

from __future__ import annotations

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        """Look up an account by its normalised (lower-case) email."""
        return await self.first(select(User).where(User.email == email.lower()))

    async def get_active(self, user_id: int) -> User | None:
        """Return the account behind a session, ``None`` once deactivated."""
        return await self.first(select(User).where(User.id == user_id, User.is_active.is_(True)))


__all__ = ["UserRepository"]
