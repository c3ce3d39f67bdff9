"""Routes for the shared tag catalogue."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import CurrentUserDependency, DatabaseSessionDependency, RateLimitDependency
from ...schemas import ApiResponse, TagCreate, TagRead
from ...services import TagService

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=ApiResponse[list[TagRead]], summary="List tags sorted by name")
async def list_tags(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[list[TagRead]]:
    tags = await TagService(session).list_tags()
    return ApiResponse[list[TagRead]](success=True, data=[TagRead.model_validate(tag) for tag in tags])


@router.post(
    "",
    response_model=ApiResponse[TagRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[RateLimitDependency],
    summary="Create a tag",
)
async def create_tag(
    payload: TagCreate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[TagRead]:
    tag = await TagService(session).create_tag(name=payload.name, color=payload.color)
    return ApiResponse[TagRead](success=True, data=TagRead.model_validate(tag), message="Tag created successfully")


__all__ = ["router"]
