"""Kanban board planning and the optimistic move protocol.

``plan_move`` turns a drag into the new task list plus the ``(id, status,
order)`` triples to persist. Only the destination lane is renumbered; tasks
left behind in the source lane keep their ``order`` values, which stay
unique enough for display even with gaps.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ..app.models import LANE_ORDER, LANE_TITLES, TaskStatus, ensure_utc, utcnow
from ..app.schemas import TaskPositionUpdate, TaskRead
from .cache import QueryCache
from .mutations import MutationRunner
from .transport import TaskboardAPI

logger = logging.getLogger(__name__)

TASKS_KEY: Hashable = "tasks"


class InvalidMoveError(ValueError):
    """The drag does not match the board as last rendered."""


@dataclass(frozen=True, slots=True)
class LanePosition:
    lane: TaskStatus
    index: int


@dataclass(frozen=True, slots=True)
class DragResult:
    task_id: int
    source: LanePosition
    destination: LanePosition | None


@dataclass(frozen=True, slots=True)
class Lane:
    status: TaskStatus
    title: str
    tasks: tuple[TaskRead, ...]


@dataclass(frozen=True, slots=True)
class MovePlan:
    task_id: int
    tasks: list[TaskRead]
    changes: list[TaskPositionUpdate]


class MoveOutcome(str, Enum):
    NOOP = "noop"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    SUPERSEDED = "superseded"


def _lane_sort_key(task: TaskRead) -> tuple:
    return (task.order, ensure_utc(task.created_at), task.id)


def build_lanes(tasks: Sequence[TaskRead]) -> list[Lane]:
    """Partition ``tasks`` into the four lanes in display order."""
    grouped: dict[TaskStatus, list[TaskRead]] = {status: [] for status in LANE_ORDER}
    for task in tasks:
        grouped[TaskStatus(task.status)].append(task)
    return [
        Lane(status=status, title=LANE_TITLES[status], tasks=tuple(sorted(grouped[status], key=_lane_sort_key)))
        for status in LANE_ORDER
    ]


def _transition(task: TaskRead, status: TaskStatus, order: int, now: datetime) -> TaskRead:
    completed_at = task.completed_at
    if status == TaskStatus.DONE and task.status != TaskStatus.DONE:
        completed_at = now
    elif status != TaskStatus.DONE:
        completed_at = None
    return task.model_copy(update={"status": status, "order": order, "completed_at": completed_at})


def plan_move(tasks: Sequence[TaskRead], drag: DragResult, *, now: datetime | None = None) -> MovePlan | None:
    """Compute the board after ``drag``, or ``None`` when nothing moves."""
    destination = drag.destination
    if destination is None or destination == drag.source:
        return None

    lanes = {lane.status: list(lane.tasks) for lane in build_lanes(tasks)}
    source_lane = lanes[drag.source.lane]
    if not 0 <= drag.source.index < len(source_lane):
        raise InvalidMoveError(f"source index {drag.source.index} is outside lane {drag.source.lane.value}")
    if source_lane[drag.source.index].id != drag.task_id:
        raise InvalidMoveError(f"task {drag.task_id} is not at the source position")

    moved = source_lane.pop(drag.source.index)
    destination_lane = lanes[destination.lane]
    if not 0 <= destination.index <= len(destination_lane):
        raise InvalidMoveError(f"destination index {destination.index} is outside lane {destination.lane.value}")

    current = ensure_utc(now) if now is not None else utcnow()
    destination_lane.insert(destination.index, _transition(moved, destination.lane, destination.index, current))

    replacements: dict[int, TaskRead] = {}
    changes: list[TaskPositionUpdate] = []
    for index, task in enumerate(destination_lane):
        if task.id != moved.id and task.order == index:
            continue
        renumbered = task if task.order == index else task.model_copy(update={"order": index})
        replacements[task.id] = renumbered
        changes.append(TaskPositionUpdate(id=task.id, status=destination.lane, order=index))

    return MovePlan(
        task_id=drag.task_id,
        tasks=[replacements.get(task.id, task) for task in tasks],
        changes=changes,
    )


class BoardReconciler:
    """Apply moves optimistically and reconcile them with the server."""

    def __init__(self, cache: QueryCache, api: TaskboardAPI, runner: MutationRunner) -> None:
        self._cache = cache
        self._api = api
        self._runner = runner

    def lanes(self) -> list[Lane]:
        return build_lanes(self._cache.get_data(TASKS_KEY) or [])

    async def move(self, drag: DragResult, *, now: datetime | None = None) -> MoveOutcome:
        plan = plan_move(self._cache.get_data(TASKS_KEY) or [], drag, now=now)
        if plan is None:
            return MoveOutcome.NOOP

        logger.info(
            "Moving task",
            extra={"task_id": drag.task_id, "lane": drag.destination.lane.value, "changes": len(plan.changes)},
        )
        result = await self._runner.run(
            lambda: self._api.bulk_update_tasks(plan.changes),
            optimistic=(TASKS_KEY, lambda _: plan.tasks),
            invalidate=(TASKS_KEY,),
            fence=drag.task_id,
            error_title="Failed to move task",
        )
        if result.superseded:
            return MoveOutcome.SUPERSEDED
        return MoveOutcome.COMMITTED if result.ok else MoveOutcome.ROLLED_BACK


__all__ = [
    "BoardReconciler",
    "DragResult",
    "InvalidMoveError",
    "Lane",
    "LanePosition",
    "MoveOutcome",
    "MovePlan",
    "TASKS_KEY",
    "build_lanes",
    "plan_move",
]
