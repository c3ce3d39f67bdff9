"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .analytics import (
    AlertFilter,
    AlertKind,
    DeadlineAlert,
    ProjectProgress,
    ProjectSummaryStats,
    TaskAnalytics,
    TimeSummary,
    TrendPoint,
)
from .auth import AuthResponse, AuthTokens, SignupRequest, TokenPayload, UserPublic
from .project import ProjectCreate, ProjectDetail, ProjectRead, ProjectUpdate
from .system import ApiResponse, HealthCheckResponse, RootResponse
from .tag import TagCreate, TagRead
from .task import (
    BulkItemResult,
    BulkTaskUpdate,
    BulkTaskUpdateResult,
    Pagination,
    ProjectSummary,
    TaskCreate,
    TaskListData,
    TaskPositionUpdate,
    TaskRead,
    TaskUpdate,
)

__all__ = [
    "AlertFilter",
    "AlertKind",
    "ApiResponse",
    "AuthResponse",
    "AuthTokens",
    "BulkItemResult",
    "BulkTaskUpdate",
    "BulkTaskUpdateResult",
    "DeadlineAlert",
    "HealthCheckResponse",
    "Pagination",
    "ProjectCreate",
    "ProjectDetail",
    "ProjectProgress",
    "ProjectRead",
    "ProjectSummary",
    "ProjectSummaryStats",
    "ProjectUpdate",
    "RootResponse",
    "SignupRequest",
    "TagCreate",
    "TagRead",
    "TaskAnalytics",
    "TaskCreate",
    "TaskListData",
    "TaskPositionUpdate",
    "TaskRead",
    "TaskUpdate",
    "TimeSummary",
    "TokenPayload",
    "TrendPoint",
    "UserPublic",
]
