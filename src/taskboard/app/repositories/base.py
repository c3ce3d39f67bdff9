"""Generic repositories over asynchronous SQLModel sessions."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Persistence helpers shared by the concrete repositories."""

    def __init__(self, session: AsyncSession, model_type: type[ModelType]) -> None:
        self._session = session
        self._model_type = model_type

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def get(self, entity_id: int) -> ModelType | None:
        return await self._session.get(self._model_type, entity_id)

    async def add(self, instance: ModelType) -> ModelType:
        """Stage ``instance`` and flush so its primary key is assigned."""
        self._session.add(instance)
        await self._session.flush()
        return instance

    async def delete(self, instance: ModelType) -> None:
        """Delete an entity, cascading along ORM relationships, and flush."""
        await self._session.delete(instance)
        await self._session.flush()

    async def first(self, query: Any) -> ModelType | None:
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def all(self, query: Any) -> list[ModelType]:
        result = await self._session.execute(query)
        return list(result.scalars().all())


class OwnedRepository(BaseRepository[ModelType]):
    """Repository for entities carrying a ``user_id`` owner column.

    Every lookup filters on the owner, so a row that belongs to somebody else
    reads exactly like a missing one. Subclasses set ``default_order`` and may
    override ``with_relations`` to eager-load what their payloads expand.
    """

    default_order: tuple[Any, ...] = ()

    def owned(self, owner_id: int) -> Any:
        model: Any = self._model_type
        return select(model).where(model.user_id == owner_id)

    def with_relations(self, query: Any) -> Any:
        return query

    async def get_for_owner(self, entity_id: int, owner_id: int) -> ModelType | None:
        model: Any = self._model_type
        return await self.first(self.with_relations(self.owned(owner_id).where(model.id == entity_id)))

    async def list_for_owner(self, owner_id: int) -> list[ModelType]:
        return await self.all(self.with_relations(self.owned(owner_id).order_by(*self.default_order)))


__all__ = ["BaseRepository", "OwnedRepository"]
