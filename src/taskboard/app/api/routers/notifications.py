"""Deadline notifications for the current user."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from ...deps import CurrentUserDependency, DatabaseSessionDependency, require_user_id
from ...schemas import AlertFilter, ApiResponse, DeadlineAlert
from ...services import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])

FilterQuery = Annotated[
    AlertFilter,
    Query(alias="filter", description="Restrict alerts to urgent ones or those due today."),
]


@router.get(
    "/deadlines",
    response_model=ApiResponse[list[DeadlineAlert]],
    summary="List overdue and upcoming task deadlines",
)
async def list_deadline_alerts(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    alert_filter: FilterQuery = AlertFilter.ALL,
) -> ApiResponse[list[DeadlineAlert]]:
    alerts = await NotificationService(session).deadline_alerts_for_owner(
        require_user_id(current_user),
        alert_filter=alert_filter,
    )
    return ApiResponse[list[DeadlineAlert]](success=True, data=alerts)


__all__ = ["router"]
