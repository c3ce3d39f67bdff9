"""Async client for the taskboard API with a cached, optimistic board."""

from __future__ import annotations

from .board import (
    BoardReconciler,
    DragResult,
    InvalidMoveError,
    Lane,
    LanePosition,
    MoveOutcome,
    MovePlan,
    build_lanes,
    plan_move,
)
from .cache import QueryCache, QueryStatus, RetryPolicy, RollbackHandle
from .config import ClientSettings
from .facade import TaskboardClient
from .mutations import LoggingNotifier, MutationResult, MutationRunner, Notifier
from .transport import ApiRequestError, TaskboardAPI

__all__ = [
    "ApiRequestError",
    "BoardReconciler",
    "ClientSettings",
    "DragResult",
    "InvalidMoveError",
    "Lane",
    "LanePosition",
    "LoggingNotifier",
    "MoveOutcome",
    "MovePlan",
    "MutationResult",
    "MutationRunner",
    "Notifier",
    "QueryCache",
    "QueryStatus",
    "RetryPolicy",
    "RollbackHandle",
    "TaskboardAPI",
    "TaskboardClient",
    "build_lanes",
    "plan_move",
]
