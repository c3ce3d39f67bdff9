from __future__ import annotations

from collections import Counter

from sqlmodel.ext.asyncio.session import AsyncSession

from taskboard.app.core.security import verify_password
from taskboard.app.db.seed import DEMO_EMAIL, DEMO_PASSWORD, seed_demo_data
from taskboard.app.models import TaskStatus
from taskboard.app.services import ProjectService, TagService, TaskService


async def test_seed_populates_the_demo_account(session: AsyncSession) -> None:
    user = await seed_demo_data(session)

    assert user.email == DEMO_EMAIL
    assert verify_password(DEMO_PASSWORD, user.hashed_password)
    projects = await ProjectService(session).list_projects(user.id)
    assert sorted(count for _, count in projects) == [3, 4, 5]
    assert len(await TagService(session).list_tags()) == 7

    tasks = await TaskService(session).list_all_tasks(user.id)
    assert Counter(task.status for task in tasks) == {
        TaskStatus.TODO: 5,
        TaskStatus.IN_PROGRESS: 3,
        TaskStatus.REVIEW: 1,
        TaskStatus.DONE: 3,
    }
    assert all(task.completed_at is not None for task in tasks if task.status is TaskStatus.DONE)
    assert all(task.tag_links for task in tasks)


async def test_seed_is_idempotent(session: AsyncSession) -> None:
    first = await seed_demo_data(session)
    second = await seed_demo_data(session)

    assert second.id == first.id
    assert len(await ProjectService(session).list_projects(first.id)) == 3
    assert len(await TaskService(session).list_all_tasks(first.id)) == 12
    assert len(await TagService(session).list_tags()) == 7
