"""ASGI application factory and the ``taskboard-api`` entry point."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware, OriginCheckMiddleware, SecurityHeadersMiddleware
from .core.rate_limit import build_rate_limiter
from .db.session import dispose_engine
from .errors import register_exception_handlers
from .schemas.system import RootResponse

logger = logging.getLogger(__name__)


def _normalise_prefix(raw_prefix: str) -> str:
    prefix = "/" + raw_prefix.strip().strip("/")
    return "" if prefix == "/" else prefix


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    settings: Settings = application.state.settings
    logger.info(
        "Application started",
        extra={"environment": settings.environment, "rate_limit_enabled": settings.rate_limit_enabled},
    )
    try:
        yield
    finally:
        await application.state.rate_limiter.close()
        await dispose_engine()


def _install_middleware(application: FastAPI, settings: Settings, prefix: str) -> None:
    # Starlette wraps in reverse order of registration, so CORS runs first.
    application.add_middleware(OriginCheckMiddleware, path_prefix=prefix or "/")
    if settings.security_headers_enabled:
        application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )


def _metadata_route(settings: Settings):
    async def read_api_metadata() -> RootResponse:
        return RootResponse(
            name=settings.project_name,
            environment=settings.environment,
            version=settings.version,
            api_prefix=settings.api_prefix,
        )

    return read_api_metadata


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API with its middleware stack, routers and error handlers."""

    settings = settings or get_settings()
    configure_logging(settings)
    prefix = _normalise_prefix(settings.api_prefix)

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Multi-user task and project tracker with a kanban board API.",
        openapi_url=f"{prefix}/openapi.json",
        lifespan=_lifespan,
    )
    application.state.settings = settings
    application.state.rate_limiter = build_rate_limiter(settings)

    _install_middleware(application, settings, prefix)
    application.include_router(api_router, prefix=prefix)
    application.include_router(health_router)
    application.add_api_route(
        f"{prefix}/metadata",
        _metadata_route(settings),
        methods=["GET"],
        response_model=RootResponse,
        summary="Service metadata",
    )
    register_exception_handlers(application)
    return application


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "taskboard.app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )


__all__ = ["app", "create_app", "run"]
