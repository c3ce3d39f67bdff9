"""Routes handling project CRUD."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import CurrentUserDependency, DatabaseSessionDependency, RateLimitDependency, require_user_id
from ...models import Project
from ...schemas import ApiResponse, ProjectCreate, ProjectDetail, ProjectRead, ProjectUpdate
from ...services import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


def _map_project(project: Project, task_count: int) -> ProjectRead:
    read = ProjectRead.model_validate(project)
    read.task_count = task_count
    return read


@router.get(
    "",
    response_model=ApiResponse[list[ProjectRead]],
    summary="List projects with their task counts, newest first",
)
async def list_projects(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[list[ProjectRead]]:
    rows = await ProjectService(session).list_projects(require_user_id(current_user))
    return ApiResponse[list[ProjectRead]](
        success=True,
        data=[_map_project(project, task_count) for project, task_count in rows],
    )


@router.post(
    "",
    response_model=ApiResponse[ProjectRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[RateLimitDependency],
    summary="Create a project",
)
async def create_project(
    payload: ProjectCreate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[ProjectRead]:
    project = await ProjectService(session).create_project(
        owner_id=require_user_id(current_user),
        name=payload.name,
        description=payload.description,
        color=payload.color,
        deadline=payload.deadline,
    )
    return ApiResponse[ProjectRead](
        success=True,
        data=_map_project(project, 0),
        message="Project created successfully",
    )


@router.get(
    "/{project_id}",
    response_model=ApiResponse[ProjectDetail],
    summary="Retrieve a project together with its tasks",
)
async def get_project(
    project_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[ProjectDetail]:
    project = await ProjectService(session).get_project(project_id, require_user_id(current_user))
    detail = ProjectDetail.model_validate(project)
    detail.task_count = len(detail.tasks)
    return ApiResponse[ProjectDetail](success=True, data=detail)


@router.api_route(
    "/{project_id}",
    methods=["PATCH", "PUT"],
    response_model=ApiResponse[ProjectRead],
    dependencies=[RateLimitDependency],
    summary="Update a project",
)
async def update_project(
    project_id: int,
    payload: ProjectUpdate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[ProjectRead]:
    service = ProjectService(session)
    project = await service.update_project(
        project_id,
        require_user_id(current_user),
        payload.model_dump(exclude_unset=True),
    )
    task_count = await service.count_tasks(project_id)
    return ApiResponse[ProjectRead](
        success=True,
        data=_map_project(project, task_count),
        message="Project updated successfully",
    )


@router.delete(
    "/{project_id}",
    response_model=ApiResponse[None],
    dependencies=[RateLimitDependency],
    summary="Delete a project and its tasks",
)
async def delete_project(
    project_id: int,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[None]:
    await ProjectService(session).delete_project(project_id, require_user_id(current_user))
    return ApiResponse[None](success=True, message="Project deleted successfully")


__all__ = ["router"]
