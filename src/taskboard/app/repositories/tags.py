"""Repository for the shared tag catalogue."""

from __future__ import annotations

from collections.abc import Sequence

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Tag
from .base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Tag)

    async def list_sorted(self) -> list[Tag]:
        return await self.all(select(Tag).order_by(Tag.name))

    async def get_by_name(self, name: str) -> Tag | None:
        return await self.first(select(Tag).where(Tag.name == name))

    async def list_by_ids(self, ids: Sequence[int]) -> list[Tag]:
        """Fetch the tags whose identifiers appear in ``ids``."""
        if not ids:
            return []
        return await self.all(select(Tag).where(Tag.id.in_(ids)))


__all__ = ["TagRepository"]
