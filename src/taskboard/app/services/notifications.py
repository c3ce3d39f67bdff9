"""Deadline alerts derived from a task list."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import PRIORITY_RANK, TaskPriority, TaskStatus, ensure_utc, utcnow
from ..repositories import TaskRepository
from ..schemas import AlertFilter, AlertKind, DeadlineAlert

ALERT_HORIZON_DAYS = 7


def _alert_kind(deadline: datetime, days_remaining: int, now: datetime) -> AlertKind | None:
    if deadline < now:
        return AlertKind.OVERDUE
    if days_remaining == 0:
        return AlertKind.DEADLINE_TODAY
    if days_remaining == 1:
        return AlertKind.DEADLINE_TOMORROW
    if days_remaining <= ALERT_HORIZON_DAYS:
        return AlertKind.DEADLINE_WEEK
    return None


def _matches(alert: DeadlineAlert, alert_filter: AlertFilter) -> bool:
    if alert_filter is AlertFilter.URGENT:
        return (
            alert.kind is AlertKind.OVERDUE
            or alert.days_remaining <= 0
            or alert.priority == TaskPriority.URGENT
        )
    if alert_filter is AlertFilter.TODAY:
        return alert.days_remaining == 0
    return True


def deadline_alerts(
    tasks: Iterable,
    *,
    now: datetime | None = None,
    alert_filter: AlertFilter = AlertFilter.ALL,
) -> list[DeadlineAlert]:
    """Return alerts for open tasks that are overdue or due within a week.

    ``days_remaining`` counts calendar days from ``now`` and is negative for
    deadlines on earlier days. Overdue alerts sort first, then the nearest
    deadlines, then the highest priority.
    """

    current = ensure_utc(now) if now is not None else utcnow()
    alerts: list[DeadlineAlert] = []
    for task in tasks:
        if task.status == TaskStatus.DONE or task.deadline is None:
            continue
        deadline = ensure_utc(task.deadline)
        days_remaining = (deadline.date() - current.date()).days
        kind = _alert_kind(deadline, days_remaining, current)
        if kind is None:
            continue
        project = getattr(task, "project", None)
        alert = DeadlineAlert(
            task_id=task.id,
            title=task.title,
            project_name=project.name if project is not None else None,
            priority=task.priority,
            deadline=deadline,
            days_remaining=days_remaining,
            kind=kind,
        )
        if _matches(alert, alert_filter):
            alerts.append(alert)

    alerts.sort(
        key=lambda alert: (
            alert.kind is not AlertKind.OVERDUE,
            alert.days_remaining,
            PRIORITY_RANK[alert.priority],
        )
    )
    return alerts


class NotificationService:
    def __init__(self, session: AsyncSession) -> None:
        self._task_repository = TaskRepository(session)

    async def deadline_alerts_for_owner(
        self,
        owner_id: int,
        *,
        alert_filter: AlertFilter = AlertFilter.ALL,
        now: datetime | None = None,
    ) -> list[DeadlineAlert]:
        tasks = await self._task_repository.list_for_owner(owner_id)
        return deadline_alerts(tasks, now=now, alert_filter=alert_filter)


__all__ = ["ALERT_HORIZON_DAYS", "NotificationService", "deadline_alerts"]
