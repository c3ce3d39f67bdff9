"""Router registrations for the taskboard API."""

from __future__ import annotations

from fastapi import APIRouter

from .analytics import router as analytics_router
from .auth import router as auth_router
from .health import router as health_router
from .notifications import router as notifications_router
from .projects import router as projects_router
from .tags import router as tags_router
from .tasks import router as tasks_router
from .users import router as users_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(tasks_router)
api_router.include_router(projects_router)
api_router.include_router(tags_router)
api_router.include_router(analytics_router)
api_router.include_router(notifications_router)

__all__ = [
    "analytics_router",
    "api_router",
    "auth_router",
    "health_router",
    "notifications_router",
    "projects_router",
    "tags_router",
    "tasks_router",
    "users_router",
]
