"""Repository for tasks, always scoped to an owner."""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import LANE_ORDER, Task, TaskPriority, TaskStatus, TaskTag
from .base import OwnedRepository

# Lane position of a task's status, for ordering lists the way the board shows them.
_LANE_RANK = sa.case(
    *[(Task.status == status, rank) for rank, status in enumerate(LANE_ORDER)],
    else_=len(LANE_ORDER),
)


class TaskRepository(OwnedRepository[Task]):
    """Task queries; every loaded task carries its project and tags."""

    default_order = (_LANE_RANK, Task.order, Task.created_at, Task.id)

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Task)

    def with_relations(self, query: Any) -> Any:
        return query.options(
            selectinload(Task.project),
            selectinload(Task.tag_links).selectinload(TaskTag.tag),
        ).execution_options(populate_existing=True)

    async def list_filtered(
        self,
        *,
        owner_id: int,
        project_id: int | None = None,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Task], int]:
        """Return one page of matching tasks along with the total match count."""
        conditions: list[Any] = []
        if project_id is not None:
            conditions.append(Task.project_id == project_id)
        if status is not None:
            conditions.append(Task.status == status)
        if priority is not None:
            conditions.append(Task.priority == priority)
        if search:
            pattern = f"%{search}%"
            conditions.append(sa.or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))

        page = self.owned(owner_id).where(*conditions).order_by(*self.default_order).limit(limit).offset(offset)
        tasks = await self.all(self.with_relations(page))
        total_result = await self.session.execute(
            select(sa.func.count()).select_from(Task).where(Task.user_id == owner_id, *conditions)
        )
        return tasks, int(total_result.scalar_one())

    async def max_order(self, owner_id: int, status: TaskStatus) -> int | None:
        """Highest ``order`` in the owner's ``status`` lane, ``None`` when empty."""
        result = await self.session.execute(
            select(sa.func.max(Task.order)).where(Task.user_id == owner_id, Task.status == status)
        )
        return result.scalar_one_or_none()


__all__ = ["TaskRepository"]
