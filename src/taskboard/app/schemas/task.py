"""Task payloads, including the bulk reorder contract."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models import TaskPriority, TaskStatus
from .common import CleanStr, LongText, UtcDatetime, reject_null
from .tag import TagRead

TASK_READ_EXAMPLE = {
    "id": 7,
    "title": "Draft release notes",
    "description": "Summarise the board changes for the changelog.",
    "status": TaskStatus.IN_PROGRESS.value,
    "priority": TaskPriority.HIGH.value,
    "deadline": "2024-05-10T17:00:00Z",
    "order": 0,
    "estimated_hours": 3.0,
    "actual_hours": None,
    "completed_at": None,
    "project_id": 2,
    "user_id": 1,
    "created_at": "2024-05-01T09:00:00Z",
    "updated_at": "2024-05-02T11:30:00Z",
    "project": {"id": 2, "name": "Website", "color": "#3B82F6"},
    "tags": [{"id": 4, "name": "docs", "color": "#6B7280"}],
}


class ProjectSummary(BaseModel):
    """Project reference expanded inside task payloads."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str


class TaskCreate(BaseModel):
    """Payload for creating a new task in the caller's TODO lane."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Draft release notes",
                "priority": TaskPriority.HIGH.value,
                "project_id": 2,
                "tag_ids": [4],
                "deadline": "2024-05-10T17:00:00Z",
            }
        }
    )

    title: CleanStr = Field(min_length=1, max_length=200)
    description: LongText = None
    priority: TaskPriority
    deadline: UtcDatetime | None = None
    project_id: int = Field(ge=1)
    tag_ids: list[int] = Field(default_factory=list)
    estimated_hours: float | None = Field(default=None, gt=0)


class TaskUpdate(BaseModel):
    """Partial update; only supplied fields change."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"status": TaskStatus.DONE.value, "actual_hours": 2.5}}
    )

    title: CleanStr | None = Field(default=None, min_length=1, max_length=200)
    description: LongText = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    deadline: UtcDatetime | None = None
    order: int | None = Field(default=None, ge=0)
    project_id: int | None = Field(default=None, ge=1)
    tag_ids: list[int] | None = None
    estimated_hours: float | None = Field(default=None, gt=0)
    actual_hours: float | None = Field(default=None, gt=0)

    @field_validator("title", "status", "priority", "order", "project_id", "tag_ids")
    @classmethod
    def _reject_null(cls, value: object) -> object:
        return reject_null(value)

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "TaskUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update.")
        return self


class TaskRead(BaseModel):
    """Public representation of a task with its project and tags expanded."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": TASK_READ_EXAMPLE},
    )

    id: int
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    deadline: UtcDatetime | None = None
    order: int
    estimated_hours: float | None = None
    actual_hours: float | None = None
    completed_at: UtcDatetime | None = None
    project_id: int
    user_id: int
    created_at: UtcDatetime
    updated_at: UtcDatetime
    project: ProjectSummary | None = None
    tags: list[TagRead] = Field(default_factory=list)


class Pagination(BaseModel):
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total_pages: int = Field(ge=0)


class TaskListData(BaseModel):
    tasks: list[TaskRead]
    pagination: Pagination


class TaskPositionUpdate(BaseModel):
    """One ``(id, status, order)`` triple of a bulk reorder."""

    id: int = Field(ge=1)
    status: TaskStatus
    order: int = Field(ge=0)


class BulkTaskUpdate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "tasks": [
                    {"id": 7, "status": TaskStatus.DONE.value, "order": 0},
                    {"id": 9, "status": TaskStatus.DONE.value, "order": 1},
                ]
            }
        }
    )

    tasks: list[TaskPositionUpdate] = Field(min_length=1, max_length=200)


class BulkItemResult(BaseModel):
    id: int
    success: bool
    code: str | None = None
    error: str | None = None


class BulkTaskUpdateResult(BaseModel):
    """Per-item outcome of a bulk update; items are applied independently."""

    results: list[BulkItemResult]
    succeeded: int = Field(ge=0)
    failed: int = Field(ge=0)


__all__ = [
    "BulkItemResult",
    "BulkTaskUpdate",
    "BulkTaskUpdateResult",
    "Pagination",
    "ProjectSummary",
    "TaskCreate",
    "TaskListData",
    "TaskPositionUpdate",
    "TaskRead",
    "TaskUpdate",
]
