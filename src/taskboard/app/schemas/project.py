"""Project payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models import DEFAULT_PROJECT_COLOR, ProjectStatus
from .common import HEX_COLOR_PATTERN, CleanStr, LongText, UtcDatetime, reject_null
from .task import TaskRead


class ProjectCreate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Website relaunch",
                "description": "Everything needed for the new marketing site.",
                "color": "#F59E0B",
            }
        }
    )

    name: CleanStr = Field(min_length=1, max_length=100)
    description: LongText = None
    color: str = Field(default=DEFAULT_PROJECT_COLOR, pattern=HEX_COLOR_PATTERN)
    deadline: UtcDatetime | None = None


class ProjectUpdate(BaseModel):
    name: CleanStr | None = Field(default=None, min_length=1, max_length=100)
    description: LongText = None
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)
    status: ProjectStatus | None = None
    deadline: UtcDatetime | None = None

    @field_validator("name", "color", "status")
    @classmethod
    def _reject_null(cls, value: object) -> object:
        return reject_null(value)

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "ProjectUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update.")
        return self


class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    color: str
    status: ProjectStatus
    deadline: UtcDatetime | None = None
    user_id: int
    created_at: UtcDatetime
    updated_at: UtcDatetime
    task_count: int = 0


class ProjectDetail(ProjectRead):
    """Project with its tasks ordered by rank."""

    tasks: list[TaskRead] = Field(default_factory=list)


__all__ = ["ProjectCreate", "ProjectDetail", "ProjectRead", "ProjectUpdate"]
