"""Domain models."""

from .common import TimestampMixin, ensure_utc, utcnow
from .project import DEFAULT_PROJECT_COLOR, Project, ProjectStatus
from .tag import DEFAULT_TAG_COLOR, Tag, TaskTag
from .task import LANE_ORDER, LANE_TITLES, PRIORITY_RANK, Task, TaskPriority, TaskStatus
from .user import User

__all__ = [
    "DEFAULT_PROJECT_COLOR",
    "DEFAULT_TAG_COLOR",
    "LANE_ORDER",
    "LANE_TITLES",
    "PRIORITY_RANK",
    "Project",
    "ProjectStatus",
    "Tag",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TaskTag",
    "TimestampMixin",
    "User",
    "ensure_utc",
    "utcnow",
]
