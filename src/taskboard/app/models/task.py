"""Task domain models built with SQLModel."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlmodel import Field, Relationship

from .common import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .project import Project
    from .tag import Tag, TaskTag
    from .user import User


class TaskStatus(str, Enum):
    """Workflow lanes a task moves through."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    DONE = "DONE"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


LANE_ORDER: tuple[TaskStatus, ...] = (
    TaskStatus.TODO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.REVIEW,
    TaskStatus.DONE,
)

LANE_TITLES: dict[TaskStatus, str] = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.REVIEW: "Review",
    TaskStatus.DONE: "Done",
}

PRIORITY_RANK: dict[TaskPriority, int] = {
    TaskPriority.URGENT: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


class Task(TimestampMixin, table=True):
    """Persistent task.

    ``order`` ranks the task inside its (user, status) lane. Ranks are not
    required to be contiguous; display sorts by lane, order, then creation.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        sa.CheckConstraint("length(title) > 0", name="ck_tasks_title_length"),
        sa.Index("ix_tasks_user_id_status", "user_id", "status"),
        sa.Index("ix_tasks_project_id", "project_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(
        max_length=200,
        sa_column=sa.Column(sa.String(length=200), nullable=False),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    status: TaskStatus = Field(
        default=TaskStatus.TODO,
        sa_column=sa.Column(
            sa.Enum(TaskStatus, name="task_status", native_enum=False, validate_strings=True),
            nullable=False,
            server_default=TaskStatus.TODO.value,
        ),
    )
    priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        sa_column=sa.Column(
            sa.Enum(TaskPriority, name="task_priority", native_enum=False, validate_strings=True),
            nullable=False,
            server_default=TaskPriority.MEDIUM.value,
        ),
    )
    deadline: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    order: int = Field(
        default=0,
        sa_column=sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
    )
    estimated_hours: float | None = Field(
        default=None,
        sa_column=sa.Column(sa.Float(), nullable=True),
    )
    actual_hours: float | None = Field(
        default=None,
        sa_column=sa.Column(sa.Float(), nullable=True),
    )
    completed_at: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    project_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )

    project: "Project" = Relationship(back_populates="tasks")
    user: "User" = Relationship(back_populates="tasks")
    tag_links: list["TaskTag"] = Relationship(
        back_populates="task",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def tags(self) -> list["Tag"]:
        return [link.tag for link in self.tag_links]

    def apply_status(self, status: TaskStatus, *, now: datetime) -> None:
        """Move the task to ``status``, maintaining ``completed_at``."""
        if status == TaskStatus.DONE and self.status != TaskStatus.DONE:
            self.completed_at = now
        elif status != TaskStatus.DONE:
            self.completed_at = None
        self.status = status


__all__ = [
    "LANE_ORDER",
    "LANE_TITLES",
    "PRIORITY_RANK",
    "Task",
    "TaskPriority",
    "TaskStatus",
]
