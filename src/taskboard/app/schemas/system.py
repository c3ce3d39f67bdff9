"""Response envelope and system-level payloads."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope wrapping every JSON response body."""

    success: bool = Field(description="Whether the request achieved its intent")
    data: DataT | None = Field(default=None, description="Payload for successful requests")
    error: str | None = Field(default=None, description="Human-readable error summary")
    message: str | None = Field(default=None, description="Additional human-readable context")
    code: str | None = Field(default=None, description="Machine-readable error identifier")
    details: Any | None = Field(
        default=None,
        description="Structured error metadata such as field errors and the request id.",
    )


class RootResponse(BaseModel):
    """Service metadata."""

    name: str
    environment: str
    version: str
    api_prefix: str


class HealthCheckResponse(BaseModel):
    status: str = Field(default="ok", description="Service health indicator")


__all__ = ["ApiResponse", "HealthCheckResponse", "RootResponse"]
