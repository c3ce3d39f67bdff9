"""Tags and the task/tag association."""

from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .common import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .task import Task

DEFAULT_TAG_COLOR = "#6B7280"


class Tag(TimestampMixin, table=True):
    __tablename__ = "tags"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(
        max_length=50,
        sa_column=sa.Column(sa.String(length=50), nullable=False, unique=True),
    )
    color: str = Field(
        default=DEFAULT_TAG_COLOR,
        sa_column=sa.Column(sa.String(length=7), nullable=False, server_default=DEFAULT_TAG_COLOR),
    )

    task_links: list["TaskTag"] = Relationship(
        back_populates="tag",
        sa_relationship_kwargs={"cascade": "all"},
    )


class TaskTag(SQLModel, table=True):
    """Join row linking one task to one tag."""

    __tablename__ = "task_tags"
    __table_args__ = (sa.UniqueConstraint("task_id", "tag_id", name="uq_task_tags_task_id_tag_id"),)

    id: int | None = Field(default=None, primary_key=True)
    task_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    tag_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )

    task: "Task" = Relationship(back_populates="tag_links")
    tag: "Tag" = Relationship(back_populates="task_links")


__all__ = ["DEFAULT_TAG_COLOR", "Tag", "TaskTag"]
