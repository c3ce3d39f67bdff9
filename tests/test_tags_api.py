from __future__ import annotations

from fastapi import status
from httpx import AsyncClient


async def test_tags_are_listed_by_name(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    for name, color in (("frontend", "#F97316"), ("backend", "#10B981"), ("chore", None)):
        body = {"name": name} if color is None else {"name": name, "color": color}
        created = await client.post("/api/tags", json=body, headers=owner.headers)
        assert created.status_code == status.HTTP_201_CREATED

    response = await client.get("/api/tags", headers=owner.headers)

    tags = response.json()["data"]
    assert [tag["name"] for tag in tags] == ["backend", "chore", "frontend"]
    assert tags[1]["color"] == "#6B7280"


async def test_duplicate_tag_name_is_conflict(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    await client.post("/api/tags", json={"name": "ops"}, headers=owner.headers)

    response = await client.post("/api/tags", json={"name": "ops"}, headers=owner.headers)

    assert response.status_code == status.HTTP_409_CONFLICT
    payload = response.json()
    assert payload["code"] == "DUPLICATE_RECORD"
    assert payload["success"] is False


async def test_tag_name_length_is_validated(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()

    response = await client.post("/api/tags", json={"name": "x" * 51}, headers=owner.headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["details"]["field"] == "name"
