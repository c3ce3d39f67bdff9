"""Liveness check served outside the API prefix."""

from __future__ import annotations

from fastapi import APIRouter

from ...schemas import HealthCheckResponse

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthCheckResponse, summary="Liveness check")
async def healthcheck() -> HealthCheckResponse:
    return HealthCheckResponse()
