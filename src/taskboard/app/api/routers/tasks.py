"""Routes handling task CRUD and bulk reordering."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from ...deps import (
    CurrentUserDependency,
    DatabaseSessionDependency,
    RateLimitDependency,
    SettingsDependency,
    require_user_id,
)
from ...models import Task, TaskPriority, TaskStatus
from ...schemas import (
    ApiResponse,
    BulkTaskUpdate,
    BulkTaskUpdateResult,
    Pagination,
    TaskCreate,
    TaskListData,
    TaskRead,
    TaskUpdate,
)
from ...services import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])

ProjectQuery = Annotated[
    int | None,
    Query(ge=1, description="Restrict results to tasks in the given project."),
]
StatusQuery = Annotated[
    TaskStatus | None,
    Query(alias="status", description="Filter results to tasks in the given lane."),
]
PriorityQuery = Annotated[
    TaskPriority | None,
    Query(description="Filter results to tasks with the given priority."),
]
SearchQuery = Annotated[
    str | None,
    Query(max_length=200, description="Case-insensitive match against title and description."),
]
PageQuery = Annotated[int, Query(ge=1, description="1-based page number.")]
LimitQuery = Annotated[
    int | None,
    Query(ge=1, le=100, description="Maximum number of tasks to return in a single page."),
]


def _map_task(task: Task) -> TaskRead:
    return TaskRead.model_validate(task)


@router.get(
    "",
    response_model=ApiResponse[TaskListData],
    summary="List tasks with filtering and pagination",
)
async def list_tasks(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    settings: SettingsDependency,
    project_id: ProjectQuery = None,
    status_filter: StatusQuery = None,
    priority: PriorityQuery = None,
    search: SearchQuery = None,
    page: PageQuery = 1,
    limit: LimitQuery = None,
) -> ApiResponse[TaskListData]:
    page_size = min(limit or settings.default_page_size, settings.max_page_size)
    result = await TaskService(session).list_tasks(
        require_user_id(current_user),
        project_id=project_id,
        status=status_filter,
        priority=priority,
        search=search,
        page=page,
        limit=page_size,
    )
    data = TaskListData(
        tasks=[_map_task(task) for task in result.tasks],
        pagination=Pagination(
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
        ),
    )
    return ApiResponse[TaskListData](success=True, data=data)


@router.post(
    "",
    response_model=ApiResponse[TaskRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[RateLimitDependency],
    summary="Create a new task",
)
async def create_task(
    payload: TaskCreate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[TaskRead]:
    task = await TaskService(session).create_task(require_user_id(current_user), payload)
    return ApiResponse[TaskRead](success=True, data=_map_task(task), message="Task created successfully")


@router.put(
    "",
    response_model=ApiResponse[BulkTaskUpdateResult],
    dependencies=[RateLimitDependency],
    summary="Apply a batch of status and order changes",
)
async def bulk_update_tasks(
    payload: BulkTaskUpdate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[BulkTaskUpdateResult]:
    result = await TaskService(session).bulk_update_positions(require_user_id(current_user), payload.tasks)
    if result.failed:
        return ApiResponse[BulkTaskUpdateResult](
            success=False,
            data=result,
            error=f"{result.failed} of {len(result.results)} tasks could not be updated.",
            code="BULK_UPDATE_INCOMPLETE",
        )
    return ApiResponse[BulkTaskUpdateResult](success=True, data=result, message="Tasks updated successfully")


@router.get(
    "/{task_id}",
    response_model=ApiResponse[TaskRead],
    summary="Retrieve a task by id",
)
async def get_task(
    task_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[TaskRead]:
    task = await TaskService(session).get_task(task_id, require_user_id(current_user))
    return ApiResponse[TaskRead](success=True, data=_map_task(task))


@router.api_route(
    "/{task_id}",
    methods=["PATCH", "PUT"],
    response_model=ApiResponse[TaskRead],
    dependencies=[RateLimitDependency],
    summary="Update an existing task",
)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[TaskRead]:
    changes = payload.model_dump(exclude_unset=True)
    task = await TaskService(session).update_task(task_id, require_user_id(current_user), changes)
    return ApiResponse[TaskRead](success=True, data=_map_task(task), message="Task updated successfully")


@router.delete(
    "/{task_id}",
    response_model=ApiResponse[None],
    dependencies=[RateLimitDependency],
    summary="Delete a task",
)
async def delete_task(
    task_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[None]:
    await TaskService(session).delete_task(task_id, require_user_id(current_user))
    return ApiResponse[None](success=True, message="Task deleted successfully")


__all__ = ["router"]
