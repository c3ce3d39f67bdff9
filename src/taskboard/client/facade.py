"""High-level client combining the cache, mutations and the board."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Hashable
from datetime import datetime
from typing import Any

from ..app.schemas import AlertFilter, DeadlineAlert, ProjectRead, TaskAnalytics, TaskCreate, TaskRead, TaskUpdate
from ..app.services.analytics import compute_analytics
from ..app.services.notifications import deadline_alerts
from .board import TASKS_KEY, BoardReconciler, DragResult, Lane, MoveOutcome
from .cache import QueryCache, RetryPolicy
from .config import ClientSettings
from .mutations import MutationRunner, Notifier
from .transport import TaskboardAPI

PROJECTS_KEY: Hashable = "projects"

# Relationship fields the server expands; never merged optimistically.
_NON_MERGEABLE = frozenset({"tag_ids"})


class TaskboardClient:
    """Cached task and project collections with optimistic mutations."""

    def __init__(
        self,
        api: TaskboardAPI,
        *,
        settings: ClientSettings | None = None,
        cache: QueryCache | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.settings = settings or api.settings
        self.api = api
        self.cache = cache or QueryCache(
            retry_policy=RetryPolicy(max_retries=self.settings.query_retries),
            clock=clock,
            sleep=sleep,
        )
        self.runner = MutationRunner(
            self.cache,
            notifier,
            retry_policy=RetryPolicy(max_retries=self.settings.mutation_retries),
            sleep=sleep,
        )
        self.board = BoardReconciler(self.cache, api, self.runner)

    async def __aenter__(self) -> "TaskboardClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.api.aclose()

    async def tasks(self) -> list[TaskRead]:
        return await self.cache.fetch(
            TASKS_KEY,
            self.api.list_all_tasks,
            stale_time=self.settings.tasks_stale_seconds,
        )

    async def projects(self) -> list[ProjectRead]:
        return await self.cache.fetch(
            PROJECTS_KEY,
            self.api.list_projects,
            stale_time=self.settings.projects_stale_seconds,
        )

    async def lanes(self) -> list[Lane]:
        await self.tasks()
        return self.board.lanes()

    async def create_task(self, payload: TaskCreate) -> TaskRead | None:
        def _append(created: TaskRead) -> None:
            self.cache.set_data(TASKS_KEY, [*(self.cache.get_data(TASKS_KEY) or []), created])

        result = await self.runner.run(
            lambda: self.api.create_task(payload),
            invalidate=(TASKS_KEY,),
            on_success=_append,
            success_message="Task created successfully",
            error_title="Failed to create task",
        )
        return result.value if result.ok else None

    async def update_task(self, task_id: int, payload: TaskUpdate) -> TaskRead | None:
        changes: dict[str, Any] = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if field not in _NON_MERGEABLE
        }

        def _merge(tasks: list[TaskRead] | None) -> list[TaskRead]:
            return [task.model_copy(update=changes) if task.id == task_id else task for task in tasks or []]

        result = await self.runner.run(
            lambda: self.api.update_task(task_id, payload),
            optimistic=(TASKS_KEY, _merge),
            invalidate=(TASKS_KEY,),
            fence=task_id,
            success_message="Task updated successfully",
            error_title="Failed to update task",
        )
        return result.value if result.ok else None

    async def delete_task(self, task_id: int) -> bool:
        def _remove(tasks: list[TaskRead] | None) -> list[TaskRead]:
            return [task for task in tasks or [] if task.id != task_id]

        result = await self.runner.run(
            lambda: self.api.delete_task(task_id),
            optimistic=(TASKS_KEY, _remove),
            invalidate=(TASKS_KEY,),
            fence=task_id,
            success_message="Task deleted successfully",
            error_title="Failed to delete task",
        )
        return result.ok

    async def move_task(self, drag: DragResult, *, now: datetime | None = None) -> MoveOutcome:
        await self.tasks()
        return await self.board.move(drag, now=now)

    async def analytics(self, *, now: datetime | None = None) -> TaskAnalytics:
        return compute_analytics(await self.tasks(), await self.projects(), now=now)

    async def deadline_alerts(
        self,
        alert_filter: AlertFilter = AlertFilter.ALL,
        *,
        now: datetime | None = None,
    ) -> list[DeadlineAlert]:
        return deadline_alerts(await self.tasks(), now=now, alert_filter=alert_filter)


__all__ = ["PROJECTS_KEY", "TaskboardClient"]
