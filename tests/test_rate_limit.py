from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable

import pytest_asyncio
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient
from limits.aio.storage import MemoryStorage, RedisStorage
from sqlmodel.ext.asyncio.session import AsyncSession

from taskboard.app.core.config import Settings
from taskboard.app.core.rate_limit import RateLimiter, build_rate_limiter
from taskboard.app.services import UserService


async def test_limiter_blocks_after_limit_per_identifier() -> None:
    limiter = RateLimiter(MemoryStorage(), max_requests=2, window_seconds=60)

    first = await limiter.hit("user:1")
    second = await limiter.hit("user:1")
    third = await limiter.hit("user:1")
    other = await limiter.hit("user:2")

    assert (first.allowed, first.remaining) == (True, 1)
    assert (second.allowed, second.remaining) == (True, 0)
    assert third.allowed is False
    assert 1 <= third.retry_after <= 60
    assert other.allowed is True


async def test_limiter_window_expires() -> None:
    limiter = RateLimiter(MemoryStorage(), max_requests=1, window_seconds=1)
    assert (await limiter.hit("user:1")).allowed is True
    assert (await limiter.hit("user:1")).allowed is False

    await asyncio.sleep(1.1)

    assert (await limiter.hit("user:1")).allowed is True


async def test_limiter_reset_clears_identifier() -> None:
    limiter = RateLimiter(MemoryStorage(), max_requests=1, window_seconds=60)
    await limiter.hit("user:1")
    assert (await limiter.hit("user:1")).allowed is False

    await limiter.reset("user:1")

    assert (await limiter.hit("user:1")).allowed is True


async def test_storage_follows_configured_backend() -> None:
    memory = build_rate_limiter(Settings(rate_limit_max_requests=5, rate_limit_window_seconds=30))
    shared = build_rate_limiter(Settings(rate_limit_backend="redis", redis_url="redis://cache.internal:6379/1"))

    assert isinstance(memory.storage, MemoryStorage)
    assert (memory.max_requests, memory.window_seconds) == (5, 30)
    assert isinstance(shared.storage, RedisStorage)
    assert Settings(rate_limit_backend="redis").rate_limit_storage_uri == "async+redis://localhost:6379/0"


@pytest_asyncio.fixture
async def limited_client(monkeypatch, app_factory: Callable[[], FastAPI]) -> AsyncIterator[AsyncClient]:
    monkeypatch.setenv("TASKBOARD_RATE_LIMIT_ENABLED", "true")
    monkeypatch.setenv("TASKBOARD_RATE_LIMIT_MAX_REQUESTS", "2")
    async with AsyncClient(transport=ASGITransport(app=app_factory()), base_url="http://testserver") as client:
        yield client


async def test_mutations_are_rate_limited_per_user(limited_client: AsyncClient, session: AsyncSession) -> None:
    await UserService(session).create_user(email="busy@example.com", password="StrongPass123!")
    login = await limited_client.post(
        "/api/auth/login",
        data={"username": "busy@example.com", "password": "StrongPass123!"},
    )
    headers = {"Authorization": f"Bearer {login.json()['data']['tokens']['access_token']}"}

    statuses = []
    for name in ("one", "two", "three"):
        response = await limited_client.post("/api/projects", json={"name": name}, headers=headers)
        statuses.append(response.status_code)

    assert statuses == [status.HTTP_201_CREATED, status.HTTP_201_CREATED, status.HTTP_429_TOO_MANY_REQUESTS]
    assert response.json()["code"] == "RATE_LIMITED"
    assert int(response.headers["Retry-After"]) >= 1

    reads = await limited_client.get("/api/tasks", headers=headers)
    assert reads.status_code == status.HTTP_200_OK
