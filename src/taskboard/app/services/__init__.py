"""Domain service layer package."""

from __future__ import annotations

from .analytics import AnalyticsService, compute_analytics
from .auth import AuthService
from .notifications import NotificationService, deadline_alerts
from .projects import ProjectService
from .tags import TagService
from .tasks import TaskPage, TaskService
from .users import UserService

__all__ = [
    "AnalyticsService",
    "AuthService",
    "NotificationService",
    "ProjectService",
    "TagService",
    "TaskPage",
    "TaskService",
    "UserService",
    "compute_analytics",
    "deadline_alerts",
]
