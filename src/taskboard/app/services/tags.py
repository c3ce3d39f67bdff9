"""Tag catalogue operations."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import DuplicateRecordError
from ..models import Tag
from ..repositories import TagRepository

logger = logging.getLogger(__name__)


class TagService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = TagRepository(session)

    async def list_tags(self) -> list[Tag]:
        return await self._repository.list_sorted()

    async def create_tag(self, *, name: str, color: str) -> Tag:
        """Create a tag; names are unique across the catalogue."""
        if await self._repository.get_by_name(name) is not None:
            raise DuplicateRecordError(f"Tag '{name}' already exists.")
        tag = Tag(name=name, color=color)
        await self._repository.add(tag)
        await self._session.commit()
        logger.info("Tag created", extra={"tag_id": tag.id})
        return tag


__all__ = ["TagService"]
