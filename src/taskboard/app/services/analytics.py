"""Dashboard analytics computed from in-memory task and project lists.

``compute_analytics`` is pure and works on anything exposing the task and
project attributes, so the client can run it over its cached collections
and the service can run it over ORM rows.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import date, datetime, timedelta
from typing import Protocol

from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import LANE_ORDER, ProjectStatus, TaskPriority, TaskStatus, ensure_utc, utcnow
from ..repositories import ProjectRepository, TaskRepository
from ..schemas import ProjectProgress, ProjectSummaryStats, TaskAnalytics, TimeSummary, TrendPoint

TREND_DAYS = 7
_SECONDS_PER_DAY = 86_400


class TaskLike(Protocol):
    status: TaskStatus
    priority: TaskPriority
    deadline: datetime | None
    completed_at: datetime | None
    created_at: datetime
    project_id: int
    estimated_hours: float | None
    actual_hours: float | None


class ProjectLike(Protocol):
    id: int | None
    name: str
    color: str
    status: ProjectStatus


def _is_done(task: TaskLike) -> bool:
    return task.status == TaskStatus.DONE


def _is_overdue(task: TaskLike, now: datetime) -> bool:
    deadline = ensure_utc(task.deadline)
    return deadline is not None and deadline < now and not _is_done(task)


def _ratio(part: float, whole: float) -> float:
    return part / whole if whole else 0.0


def _average_completion_days(tasks: Sequence[TaskLike]) -> float:
    durations = [
        (ensure_utc(task.completed_at) - ensure_utc(task.created_at)).total_seconds() / _SECONDS_PER_DAY
        for task in tasks
        if task.completed_at is not None and task.created_at is not None
    ]
    if not durations:
        return 0.0
    return max(sum(durations) / len(durations), 0.0)


def _project_progress(tasks: Sequence[TaskLike], projects: Sequence[ProjectLike]) -> list[ProjectProgress]:
    totals: Counter[int] = Counter(task.project_id for task in tasks)
    completed: Counter[int] = Counter(task.project_id for task in tasks if _is_done(task))
    progress = []
    for project in projects:
        if project.id is None or totals[project.id] == 0:
            continue
        progress.append(
            ProjectProgress(
                project_id=project.id,
                name=project.name,
                color=project.color,
                total=totals[project.id],
                completed=completed[project.id],
                completion_rate=_ratio(completed[project.id], totals[project.id]),
            )
        )
    return progress


def _trend(tasks: Sequence[TaskLike], today: date, days: int) -> list[TrendPoint]:
    created: Counter[date] = Counter(ensure_utc(task.created_at).date() for task in tasks)
    completed: Counter[date] = Counter(
        ensure_utc(task.completed_at).date() for task in tasks if task.completed_at is not None
    )
    points = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        points.append(TrendPoint(date=day, created=created[day], completed=completed[day]))
    return points


def _project_summary(projects: Sequence[ProjectLike]) -> ProjectSummaryStats:
    total = len(projects)
    active = sum(1 for project in projects if project.status == ProjectStatus.ACTIVE)
    done = sum(1 for project in projects if project.status == ProjectStatus.COMPLETED)
    return ProjectSummaryStats(total=total, active=active, completed=done, completion_rate=_ratio(done, total))


def _time_summary(tasks: Sequence[TaskLike]) -> TimeSummary:
    estimated = sum(task.estimated_hours or 0.0 for task in tasks)
    actual = sum(task.actual_hours or 0.0 for task in tasks)
    return TimeSummary(estimated_hours=estimated, actual_hours=actual, efficiency=_ratio(estimated, actual))


def compute_analytics(
    tasks: Sequence[TaskLike],
    projects: Sequence[ProjectLike] = (),
    *,
    now: datetime | None = None,
    trend_days: int = TREND_DAYS,
) -> TaskAnalytics:
    """Aggregate counts, rates, distributions and the daily trend."""

    current = ensure_utc(now) if now is not None else utcnow()
    total = len(tasks)
    completed = sum(1 for task in tasks if _is_done(task))

    status_distribution = {status.value: 0 for status in LANE_ORDER}
    for task in tasks:
        status_distribution[TaskStatus(task.status).value] += 1
    priority_distribution = {priority.value: 0 for priority in TaskPriority}
    for task in tasks:
        priority_distribution[TaskPriority(task.priority).value] += 1

    return TaskAnalytics(
        total=total,
        completed=completed,
        pending=total - completed,
        overdue=sum(1 for task in tasks if _is_overdue(task, current)),
        completion_rate=_ratio(completed, total),
        average_completion_days=_average_completion_days(tasks),
        status_distribution=status_distribution,
        priority_distribution=priority_distribution,
        projects=_project_progress(tasks, projects),
        trend=_trend(tasks, current.date(), trend_days),
        project_summary=_project_summary(projects),
        time_summary=_time_summary(tasks),
    )


class AnalyticsService:
    def __init__(self, session: AsyncSession) -> None:
        self._task_repository = TaskRepository(session)
        self._project_repository = ProjectRepository(session)

    async def analytics_for_owner(self, owner_id: int, *, now: datetime | None = None) -> TaskAnalytics:
        tasks = await self._task_repository.list_for_owner(owner_id)
        projects = await self._project_repository.list_for_owner(owner_id)
        return compute_analytics(tasks, projects, now=now)


__all__ = ["AnalyticsService", "ProjectLike", "TaskLike", "compute_analytics"]
