"""Projects group a user's tasks."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlmodel import Field, Relationship

from .common import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .task import Task
    from .user import User

DEFAULT_PROJECT_COLOR = "#3B82F6"


class ProjectStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"
    ON_HOLD = "ON_HOLD"


class Project(TimestampMixin, table=True):
    """Persistent project; deleting it removes its tasks."""

    __tablename__ = "projects"
    __table_args__ = (
        sa.CheckConstraint("length(name) > 0", name="ck_projects_name_length"),
        sa.Index("ix_projects_user_id", "user_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(
        max_length=100,
        sa_column=sa.Column(sa.String(length=100), nullable=False),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    color: str = Field(
        default=DEFAULT_PROJECT_COLOR,
        sa_column=sa.Column(sa.String(length=7), nullable=False, server_default=DEFAULT_PROJECT_COLOR),
    )
    status: ProjectStatus = Field(
        default=ProjectStatus.ACTIVE,
        sa_column=sa.Column(
            sa.Enum(ProjectStatus, name="project_status", native_enum=False, validate_strings=True),
            nullable=False,
            server_default=ProjectStatus.ACTIVE.value,
        ),
    )
    deadline: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )

    user: "User" = Relationship(back_populates="projects")
    tasks: list["Task"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"cascade": "all", "order_by": "Task.order"},
    )


__all__ = ["DEFAULT_PROJECT_COLOR", "Project", "ProjectStatus"]
