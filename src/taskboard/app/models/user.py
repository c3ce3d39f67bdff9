"""User accounts owning projects and tasks."""

from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlmodel import Field, Relationship

from .common import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .project import Project
    from .task import Task


class User(TimestampMixin, table=True):
    __tablename__ = "users"
    __table_args__ = (sa.Index("ix_users_email", "email"),)

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(
        max_length=320,
        sa_column=sa.Column(sa.String(length=320), nullable=False, unique=True),
    )
    name: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=255), nullable=True),
    )
    image: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=2048), nullable=True),
    )
    hashed_password: str = Field(
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    is_active: bool = Field(
        default=True,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    projects: list["Project"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all"},
    )
    tasks: list["Task"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all"},
    )


__all__ = ["User"]
