from __future__ import annotations

import os

os.environ.setdefault("TASKBOARD_ENVIRONMENT", "test")
os.environ.setdefault("TASKBOARD_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncIterator, Awaitable, Callable  # noqa: E402
from dataclasses import dataclass, field  # noqa: E402
from itertools import count  # noqa: E402

import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from taskboard.app.core.config import get_settings  # noqa: E402
from taskboard.app.db.session import enable_sqlite_foreign_keys  # noqa: E402
from taskboard.app.deps import get_db_session  # noqa: E402
from taskboard.app.main import create_app  # noqa: E402
from taskboard.app.models import User  # noqa: E402
from taskboard.app.services import UserService  # noqa: E402

BASE_URL = "http://testserver"


@dataclass(slots=True)
class BoardUser:
    """A persisted account plus the bearer token tests send for it."""

    user: User
    password: str
    access_token: str | None = field(default=None)

    @property
    def id(self) -> int:
        assert self.user.id is not None
        return self.user.id

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def headers(self) -> dict[str, str]:
        if self.access_token is None:
            raise RuntimeError(f"{self.email} never logged in.")
        return {"Authorization": f"Bearer {self.access_token}"}


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    # One shared connection keeps the in-memory database alive across sessions.
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()


@pytest_asyncio.fixture
async def app_factory(session: AsyncSession) -> AsyncIterator[Callable[[], FastAPI]]:
    """Build apps from the current environment, all bound to the test session."""

    built: list[FastAPI] = []

    async def _shared_session() -> AsyncIterator[AsyncSession]:
        yield session

    def _build() -> FastAPI:
        get_settings.cache_clear()
        application = create_app()
        application.dependency_overrides[get_db_session] = _shared_session
        built.append(application)
        return application

    yield _build
    for application in built:
        await application.state.rate_limiter.close()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def app(app_factory: Callable[[], FastAPI]) -> FastAPI:
    return app_factory()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as http_client:
        yield http_client


@pytest_asyncio.fixture
async def authenticated_user(
    session: AsyncSession,
    client: AsyncClient,
) -> Callable[..., Awaitable[BoardUser]]:
    users = UserService(session)
    serial = count(1)

    async def _create(
        *,
        email: str | None = None,
        password: str = "StrongPass123!",
        name: str | None = "Board User",
        login: bool = True,
    ) -> BoardUser:
        user = await users.create_user(
            email=email or f"member-{next(serial)}@example.com",
            password=password,
            name=name,
        )
        board_user = BoardUser(user=user, password=password)
        if login:
            response = await client.post("/api/auth/login", data={"username": user.email, "password": password})
            assert response.status_code == 200, response.text
            board_user.access_token = response.json()["data"]["tokens"]["access_token"]
        return board_user

    return _create
