"""Dashboard analytics for the current user."""

from __future__ import annotations

from fastapi import APIRouter

from ...deps import CurrentUserDependency, DatabaseSessionDependency, require_user_id
from ...schemas import ApiResponse, TaskAnalytics
from ...services import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=ApiResponse[TaskAnalytics], summary="Aggregate task and project analytics")
async def read_analytics(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> ApiResponse[TaskAnalytics]:
    analytics = await AnalyticsService(session).analytics_for_owner(require_user_id(current_user))
    return ApiResponse[TaskAnalytics](success=True, data=analytics)


__all__ = ["router"]
