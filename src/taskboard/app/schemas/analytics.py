"""Analytics and deadline alert payloads."""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import BaseModel, Field

from ..models import TaskPriority


class ProjectProgress(BaseModel):
    project_id: int
    name: str
    color: str
    total: int
    completed: int
    completion_rate: float


class TrendPoint(BaseModel):
    date: dt.date
    created: int
    completed: int


class ProjectSummaryStats(BaseModel):
    total: int = 0
    active: int = 0
    completed: int = 0
    completion_rate: float = 0.0


class TimeSummary(BaseModel):
    estimated_hours: float = 0.0
    actual_hours: float = 0.0
    efficiency: float = 0.0


class TaskAnalytics(BaseModel):
    """Aggregates derived from a task list and a project list."""

    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0
    completion_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    average_completion_days: float = Field(default=0.0, ge=0.0)
    status_distribution: dict[str, int] = Field(default_factory=dict)
    priority_distribution: dict[str, int] = Field(default_factory=dict)
    projects: list[ProjectProgress] = Field(default_factory=list)
    trend: list[TrendPoint] = Field(default_factory=list)
    project_summary: ProjectSummaryStats = Field(default_factory=ProjectSummaryStats)
    time_summary: TimeSummary = Field(default_factory=TimeSummary)


class AlertKind(str, Enum):
    OVERDUE = "overdue"
    DEADLINE_TODAY = "deadline_today"
    DEADLINE_TOMORROW = "deadline_tomorrow"
    DEADLINE_WEEK = "deadline_week"


class AlertFilter(str, Enum):
    ALL = "all"
    URGENT = "urgent"
    TODAY = "today"


class DeadlineAlert(BaseModel):
    task_id: int
    title: str
    project_name: str | None = None
    priority: TaskPriority
    deadline: dt.datetime
    days_remaining: int
    kind: AlertKind


__all__ = [
    "AlertFilter",
    "AlertKind",
    "DeadlineAlert",
    "ProjectProgress",
    "ProjectSummaryStats",
    "TaskAnalytics",
    "TimeSummary",
    "TrendPoint",
]
