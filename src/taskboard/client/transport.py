"""HTTP transport for the taskboard API."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from ..app.schemas import (
    AuthResponse,
    BulkTaskUpdateResult,
    ProjectRead,
    TagRead,
    TaskCreate,
    TaskListData,
    TaskPositionUpdate,
    TaskRead,
    TaskUpdate,
)
from .config import ClientSettings

logger = logging.getLogger(__name__)

_AUTH_DENIED = frozenset({401, 403})


class ApiRequestError(Exception):
    """A request that failed in transport or came back unsuccessful."""

    def __init__(self, status_code: int | None, code: str | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message

    @property
    def is_auth_denied(self) -> bool:
        return self.status_code in _AUTH_DENIED

    def __repr__(self) -> str:
        return f"ApiRequestError(status_code={self.status_code!r}, code={self.code!r}, message={self.message!r})"


class TaskboardAPI:
    """Thin async wrapper that unwraps the response envelope."""

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or ClientSettings()
        self._client = client or httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout_seconds,
        )
        self._token = token

    async def __aenter__(self) -> "TaskboardAPI":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def token(self) -> str | None:
        return self._token

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Request failed in transport", extra={"method": method, "path": path})
            raise ApiRequestError(None, "NETWORK_ERROR", str(exc) or exc.__class__.__name__) from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_error or not body.get("success", False):
            message = body.get("error") or body.get("message") or f"HTTP {response.status_code}: {response.reason_phrase}"
            raise ApiRequestError(response.status_code, body.get("code"), message)
        return body.get("data")

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self._request("POST", "/auth/login", data={"username": email, "password": password})
        auth = AuthResponse.model_validate(data)
        self._token = auth.tokens.access_token
        return auth

    async def list_tasks(self, *, page: int = 1, limit: int | None = None, **filters: Any) -> TaskListData:
        params = {key: value for key, value in filters.items() if value is not None}
        params.update(page=page, limit=limit or self.settings.page_size)
        data = await self._request("GET", "/tasks", params=params)
        return TaskListData.model_validate(data)

    async def list_all_tasks(self) -> list[TaskRead]:
        """Walk every page of the task list."""
        tasks: list[TaskRead] = []
        page = 1
        while True:
            batch = await self.list_tasks(page=page)
            tasks.extend(batch.tasks)
            if page >= batch.pagination.total_pages:
                return tasks
            page += 1

    async def get_task(self, task_id: int) -> TaskRead:
        return TaskRead.model_validate(await self._request("GET", f"/tasks/{task_id}"))

    async def create_task(self, payload: TaskCreate) -> TaskRead:
        data = await self._request("POST", "/tasks", json=payload.model_dump(mode="json"))
        return TaskRead.model_validate(data)

    async def update_task(self, task_id: int, payload: TaskUpdate) -> TaskRead:
        data = await self._request(
            "PATCH",
            f"/tasks/{task_id}",
            json=payload.model_dump(mode="json", exclude_unset=True),
        )
        return TaskRead.model_validate(data)

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")

    async def bulk_update_tasks(self, changes: Sequence[TaskPositionUpdate]) -> BulkTaskUpdateResult:
        payload = {"tasks": [change.model_dump(mode="json") for change in changes]}
        return BulkTaskUpdateResult.model_validate(await self._request("PUT", "/tasks", json=payload))

    async def list_projects(self) -> list[ProjectRead]:
        data = await self._request("GET", "/projects")
        return [ProjectRead.model_validate(item) for item in data or []]

    async def list_tags(self) -> list[TagRead]:
        data = await self._request("GET", "/tags")
        return [TagRead.model_validate(item) for item in data or []]


__all__ = ["ApiRequestError", "TaskboardAPI"]
