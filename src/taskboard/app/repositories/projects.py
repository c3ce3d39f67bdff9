"""Repository for projects, always scoped to an owner."""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Project, Task, TaskTag
from .base import OwnedRepository


class ProjectRepository(OwnedRepository[Project]):
    default_order = (Project.created_at.desc(), Project.id.desc())

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Project)

    async def get_with_tasks(self, project_id: int, owner_id: int) -> Project | None:
        """Like ``get_for_owner`` but with tasks and their tags loaded."""
        return await self.first(
            self.owned(owner_id)
            .where(Project.id == project_id)
            .options(
                selectinload(Project.tasks).selectinload(Task.project),
                selectinload(Project.tasks).selectinload(Task.tag_links).selectinload(TaskTag.tag),
            )
            .execution_options(populate_existing=True)
        )

    async def list_with_task_counts(self, owner_id: int) -> list[tuple[Project, int]]:
        """Return the owner's projects, newest first, with their task totals."""
        task_count = (
            select(func.count(Task.id))
            .where(Task.project_id == Project.id)
            .correlate(Project)
            .scalar_subquery()
        )
        result = await self.session.execute(
            select(Project, task_count)
            .where(Project.user_id == owner_id)
            .order_by(*self.default_order)
        )
        return [(project, int(count)) for project, count in result.all()]

    async def count_tasks(self, project_id: int) -> int:
        result = await self.session.execute(select(func.count(Task.id)).where(Task.project_id == project_id))
        return int(result.scalar_one())


__all__ = ["ProjectRepository"]
