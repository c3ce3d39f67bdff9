"""Owner-scoped data access for the taskboard entities."""

from __future__ import annotations

from .base import BaseRepository, OwnedRepository
from .projects import ProjectRepository
from .tags import TagRepository
from .tasks import TaskRepository
from .users import UserRepository

__all__ = [
    "BaseRepository",
    "OwnedRepository",
    "ProjectRepository",
    "TagRepository",
    "TaskRepository",
    "UserRepository",
]
