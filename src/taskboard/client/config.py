"""Configuration for the board client."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Freshness windows, retry budgets and the API location."""

    model_config = SettingsConfigDict(env_prefix="TASKBOARD_CLIENT_", extra="ignore")

    base_url: str = "http://localhost:8000/api"
    timeout_seconds: float = Field(default=10.0, gt=0)
    tasks_stale_seconds: float = Field(default=30.0, ge=0)
    projects_stale_seconds: float = Field(default=300.0, ge=0)
    query_retries: int = Field(default=3, ge=0)
    mutation_retries: int = Field(default=1, ge=0)
    page_size: int = Field(default=100, ge=1, le=100)


__all__ = ["ClientSettings"]
