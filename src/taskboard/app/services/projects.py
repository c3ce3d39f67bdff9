"""Service layer for projects."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import ProjectNotFoundError
from ..models import DEFAULT_PROJECT_COLOR, Project
from ..repositories import ProjectRepository

logger = logging.getLogger(__name__)

_MUTABLE_FIELDS = ("name", "description", "color", "status", "deadline")


class ProjectService:
    """Project CRUD gated by the owner check."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = ProjectRepository(session)

    async def list_projects(self, owner_id: int) -> list[tuple[Project, int]]:
        return await self._repository.list_with_task_counts(owner_id)

    async def get_project(self, project_id: int, owner_id: int) -> Project:
        """Return the project with its tasks, or raise when absent or not owned."""
        project = await self._repository.get_with_tasks(project_id, owner_id)
        if project is None:
            raise ProjectNotFoundError()
        return project

    async def count_tasks(self, project_id: int) -> int:
        return await self._repository.count_tasks(project_id)

    async def create_project(
        self,
        *,
        owner_id: int,
        name: str,
        description: str | None = None,
        color: str = DEFAULT_PROJECT_COLOR,
        deadline: datetime | None = None,
    ) -> Project:
        project = Project(
            name=name,
            description=description,
            color=color,
            deadline=deadline,
            user_id=owner_id,
        )
        await self._repository.add(project)
        await self._session.commit()
        logger.info("Project created", extra={"project_id": project.id, "user_id": owner_id})
        return project

    async def update_project(self, project_id: int, owner_id: int, changes: dict[str, Any]) -> Project:
        project = await self._repository.get_for_owner(project_id, owner_id)
        if project is None:
            raise ProjectNotFoundError()
        for field in _MUTABLE_FIELDS:
            if field in changes:
                setattr(project, field, changes[field])
        await self._session.commit()
        logger.info(
            "Project updated",
            extra={"project_id": project_id, "fields": sorted(set(changes) & set(_MUTABLE_FIELDS))},
        )
        return project

    async def delete_project(self, project_id: int, owner_id: int) -> None:
        """Delete a project together with its tasks and their tag links."""
        project = await self._repository.get_for_owner(project_id, owner_id)
        if project is None:
            raise ProjectNotFoundError()
        await self._repository.delete(project)
        await self._session.commit()
        logger.info("Project deleted", extra={"project_id": project_id, "user_id": owner_id})


__all__ = ["ProjectService"]
