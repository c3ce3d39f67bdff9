"""Service layer encapsulating task operations."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import ForeignKeyError, ProjectNotFoundError, TaskNotFoundError
from ..models import Project, Task, TaskPriority, TaskStatus, TaskTag, utcnow
from ..repositories import ProjectRepository, TagRepository, TaskRepository
from ..schemas import BulkItemResult, BulkTaskUpdateResult, TaskCreate, TaskPositionUpdate

logger = logging.getLogger(__name__)

_PLAIN_FIELDS = (
    "title",
    "description",
    "priority",
    "deadline",
    "order",
    "project_id",
    "estimated_hours",
    "actual_hours",
)


@dataclass(slots=True)
class TaskPage:
    tasks: list[Task]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class TaskService:
    """High-level business orchestration for ``Task`` entities.

    Every operation takes the caller's user id; tasks owned by someone else
    are reported as missing.
    """

    def __init__(self, session: AsyncSession, *, clock: Callable[[], datetime] = utcnow) -> None:
        self._session = session
        self._clock = clock
        self._repository = TaskRepository(session)
        self._project_repository = ProjectRepository(session)
        self._tag_repository = TagRepository(session)

    async def _require_project(self, project_id: int, owner_id: int) -> Project:
        project = await self._project_repository.get_for_owner(project_id, owner_id)
        if project is None:
            raise ProjectNotFoundError()
        return project

    async def _resolve_tag_ids(self, tag_ids: Sequence[int]) -> list[int]:
        unique_ids = list(dict.fromkeys(tag_ids))
        tags = await self._tag_repository.list_by_ids(unique_ids)
        missing = sorted(set(unique_ids) - {tag.id for tag in tags})
        if missing:
            raise ForeignKeyError("One or more tags do not exist.", details={"tag_ids": missing})
        return unique_ids

    async def list_tasks(
        self,
        owner_id: int,
        *,
        project_id: int | None = None,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> TaskPage:
        tasks, total = await self._repository.list_filtered(
            owner_id=owner_id,
            project_id=project_id,
            status=status,
            priority=priority,
            search=search.strip() if search else None,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return TaskPage(tasks=tasks, total=total, page=page, limit=limit)

    async def list_all_tasks(self, owner_id: int) -> list[Task]:
        return await self._repository.list_for_owner(owner_id)

    async def get_task(self, task_id: int, owner_id: int) -> Task:
        task = await self._repository.get_for_owner(task_id, owner_id)
        if task is None:
            raise TaskNotFoundError()
        return task

    async def create_task(self, owner_id: int, payload: TaskCreate) -> Task:
        """Create a task at the bottom of the owner's TODO lane."""
        project = await self._require_project(payload.project_id, owner_id)
        tag_ids = await self._resolve_tag_ids(payload.tag_ids)
        last_order = await self._repository.max_order(owner_id, TaskStatus.TODO)

        task = Task(
            title=payload.title,
            description=payload.description,
            priority=payload.priority,
            deadline=payload.deadline,
            estimated_hours=payload.estimated_hours,
            status=TaskStatus.TODO,
            order=(last_order or 0) + 1,
            project_id=project.id,
            user_id=owner_id,
        )
        task.tag_links = [TaskTag(tag_id=tag_id) for tag_id in tag_ids]
        await self._repository.add(task)
        await self._session.commit()
        logger.info(
            "Task created",
            extra={"task_id": task.id, "user_id": owner_id, "project_id": project.id},
        )
        return await self.get_task(task.id, owner_id)

    async def update_task(self, task_id: int, owner_id: int, changes: dict[str, Any]) -> Task:
        """Apply a partial update.

        Entering DONE stamps ``completed_at``; leaving DONE clears it. A
        supplied ``tag_ids`` list replaces every existing tag link.
        """
        task = await self.get_task(task_id, owner_id)
        if "project_id" in changes and changes["project_id"] != task.project_id:
            await self._require_project(changes["project_id"], owner_id)
        tag_ids = None
        if changes.get("tag_ids") is not None:
            tag_ids = await self._resolve_tag_ids(changes["tag_ids"])

        if "status" in changes:
            task.apply_status(changes["status"], now=self._clock())
        for field in _PLAIN_FIELDS:
            if field in changes:
                setattr(task, field, changes[field])

        if tag_ids is not None:
            task.tag_links.clear()
            await self._session.flush()
            task.tag_links.extend(TaskTag(tag_id=tag_id) for tag_id in tag_ids)

        await self._session.commit()
        logger.info(
            "Task updated",
            extra={"task_id": task_id, "user_id": owner_id, "fields": sorted(changes)},
        )
        return await self.get_task(task_id, owner_id)

    async def delete_task(self, task_id: int, owner_id: int) -> None:
        task = await self.get_task(task_id, owner_id)
        await self._repository.delete(task)
        await self._session.commit()
        logger.info("Task deleted", extra={"task_id": task_id, "user_id": owner_id})

    async def bulk_update_positions(
        self,
        owner_id: int,
        items: Sequence[TaskPositionUpdate],
    ) -> BulkTaskUpdateResult:
        """Apply each ``(id, status, order)`` triple in its own commit.

        A failing item never rolls back items applied before it; the result
        lists the outcome of every item in request order.
        """
        results: list[BulkItemResult] = []
        for item in items:
            task = await self._repository.get_for_owner(item.id, owner_id)
            if task is None:
                results.append(
                    BulkItemResult(
                        id=item.id,
                        success=False,
                        code=TaskNotFoundError.default_code,
                        error=TaskNotFoundError.default_message,
                    )
                )
                continue
            try:
                task.apply_status(item.status, now=self._clock())
                task.order = item.order
                await self._session.commit()
            except SQLAlchemyError:
                await self._session.rollback()
                logger.exception("Bulk task update failed", extra={"task_id": item.id})
                results.append(
                    BulkItemResult(id=item.id, success=False, code="DATABASE_ERROR", error="Failed to update task.")
                )
                continue
            results.append(BulkItemResult(id=item.id, success=True))

        failed = sum(1 for result in results if not result.success)
        logger.info(
            "Bulk task update applied",
            extra={"user_id": owner_id, "succeeded": len(results) - failed, "failed": failed},
        )
        return BulkTaskUpdateResult(results=results, succeeded=len(results) - failed, failed=failed)


__all__ = ["TaskPage", "TaskService"]
