"""Seed script for populating development data."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import get_settings
from ..core.logging import configure_logging
from ..models import Tag, TaskPriority, TaskStatus, User, utcnow
from ..repositories import TagRepository
from ..schemas import TaskCreate
from ..services import ProjectService, TaskService, UserService
from .session import async_session_maker

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@taskmanager.dev"
DEMO_PASSWORD = "demo-password"

TAGS = {
    "urgent": "#EF4444",
    "frontend": "#3B82F6",
    "backend": "#10B981",
    "design": "#8B5CF6",
    "bug": "#F59E0B",
    "api": "#06B6D4",
    "testing": "#84CC16",
}

PROJECTS = (
    ("E-commerce Platform", "Full-stack e-commerce platform with a web storefront", "#3B82F6"),
    ("Task Manager Mobile", "Cross-platform mobile app for task management", "#10B981"),
    ("Infrastructure & DevOps", "Cloud infrastructure and deployment automation", "#8B5CF6"),
)

# (project index, title, status, priority, days until deadline, tags)
TASKS = (
    (0, "Implement database connection", TaskStatus.IN_PROGRESS, TaskPriority.HIGH, 5, ("backend", "api")),
    (0, "Design product catalog UI", TaskStatus.DONE, TaskPriority.HIGH, -2, ("frontend", "design")),
    (0, "Build shopping cart functionality", TaskStatus.TODO, TaskPriority.URGENT, 1, ("frontend", "backend")),
    (0, "Integrate payment gateway", TaskStatus.TODO, TaskPriority.HIGH, 12, ("backend", "api")),
    (0, "Fix responsive checkout bug", TaskStatus.IN_PROGRESS, TaskPriority.URGENT, -1, ("bug", "frontend", "urgent")),
    (1, "Set up navigation", TaskStatus.DONE, TaskPriority.MEDIUM, -6, ("frontend",)),
    (1, "Implement offline task sync", TaskStatus.IN_PROGRESS, TaskPriority.MEDIUM, 9, ("backend", "api")),
    (1, "Design onboarding flow", TaskStatus.TODO, TaskPriority.LOW, 20, ("design", "frontend")),
    (2, "Configure CI/CD pipeline", TaskStatus.DONE, TaskPriority.HIGH, -4, ("backend",)),
    (2, "Set up monitoring and logging", TaskStatus.REVIEW, TaskPriority.MEDIUM, 14, ("backend",)),
    (2, "Write comprehensive tests", TaskStatus.TODO, TaskPriority.MEDIUM, 25, ("testing", "backend", "frontend")),
    (2, "Optimize database queries", TaskStatus.TODO, TaskPriority.LOW, 30, ("backend", "api")),
)


async def _ensure_tags(session: AsyncSession) -> dict[str, int]:
    """Return tag ids by name, creating the missing ones."""
    repository = TagRepository(session)
    ids: dict[str, int] = {}
    for name, color in TAGS.items():
        tag = await repository.get_by_name(name)
        if tag is None:
            tag = await repository.add(Tag(name=name, color=color))
        ids[name] = tag.id
    await session.commit()
    return ids


async def seed_demo_data(session: AsyncSession, *, now: datetime | None = None) -> User:
    """Create the demo account with sample projects, tags and tasks.

    Running it again leaves an already populated account untouched.
    """
    now = now or utcnow()
    user_service = UserService(session)
    project_service = ProjectService(session)
    task_service = TaskService(session)

    user = await user_service.get_user_by_email(DEMO_EMAIL)
    if user is None:
        user = await user_service.create_user(email=DEMO_EMAIL, password=DEMO_PASSWORD, name="Demo User")

    if await project_service.list_projects(user.id):
        logger.info("Demo data already present", extra={"user_id": user.id})
        return user

    tag_ids = await _ensure_tags(session)
    projects = [
        await project_service.create_project(owner_id=user.id, name=name, description=description, color=color)
        for name, description, color in PROJECTS
    ]
    for project_index, title, status, priority, days, tags in TASKS:
        task = await task_service.create_task(
            user.id,
            TaskCreate(
                title=title,
                priority=priority,
                project_id=projects[project_index].id,
                deadline=now + timedelta(days=days),
                tag_ids=[tag_ids[name] for name in tags],
            ),
        )
        if status is not TaskStatus.TODO:
            await task_service.update_task(task.id, user.id, {"status": status})

    logger.info(
        "Demo data seeded",
        extra={"user_id": user.id, "projects": len(projects), "tasks": len(TASKS)},
    )
    return user


async def seed() -> None:
    async with async_session_maker() as session:
        await seed_demo_data(session)


def main() -> None:
    """Entry-point hook for ``python -m`` execution."""
    configure_logging(get_settings())
    asyncio.run(seed())


if __name__ == "__main__":  # pragma: no cover - manual execution entry-point
    main()


__all__ = ["DEMO_EMAIL", "DEMO_PASSWORD", "seed", "seed_demo_data"]
