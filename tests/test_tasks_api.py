from __future__ import annotations

from typing import Any

import pytest
from fastapi import status
from httpx import AsyncClient


async def _create_project(client: AsyncClient, owner, **overrides: Any) -> dict[str, Any]:
    payload = {"name": "Website relaunch", **overrides}
    response = await client.post("/api/projects", json=payload, headers=owner.headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()["data"]


async def _create_task(client: AsyncClient, owner, project_id: int, **overrides: Any) -> dict[str, Any]:
    payload = {"title": "Draft release notes", "priority": "HIGH", "project_id": project_id, **overrides}
    response = await client.post("/api/tasks", json=payload, headers=owner.headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()["data"]


async def _create_tag(client: AsyncClient, owner, name: str) -> dict[str, Any]:
    response = await client.post("/api/tags", json={"name": name}, headers=owner.headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()["data"]


async def test_requests_without_session_are_rejected(client: AsyncClient) -> None:
    response = await client.get("/api/tasks")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    payload = response.json()
    assert payload["success"] is False
    assert payload["code"] == "UNAUTHORIZED"
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_invalid_token_is_rejected(client: AsyncClient) -> None:
    response = await client.get("/api/tasks", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "UNAUTHORIZED"


async def test_create_task_returns_expanded_project_and_tags(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner, color="#F59E0B")
    tag = await _create_tag(client, owner, "docs")

    task = await _create_task(
        client,
        owner,
        project["id"],
        description="Summarise the board changes.",
        deadline="2030-05-10T17:00:00Z",
        tag_ids=[tag["id"], tag["id"]],
        estimated_hours=3,
    )

    assert task["status"] == "TODO"
    assert task["priority"] == "HIGH"
    assert task["order"] == 1
    assert task["user_id"] == owner.id
    assert task["project"] == {"id": project["id"], "name": "Website relaunch", "color": "#F59E0B"}
    assert [item["name"] for item in task["tags"]] == ["docs"]
    assert task["completed_at"] is None
    assert task["deadline"].startswith("2030-05-10T17:00:00")


async def test_new_tasks_go_to_the_bottom_of_the_todo_lane(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)

    first = await _create_task(client, owner, project["id"], title="First")
    second = await _create_task(client, owner, project["id"], title="Second")
    await client.patch(f"/api/tasks/{first['id']}", json={"order": 10}, headers=owner.headers)
    third = await _create_task(client, owner, project["id"], title="Third")

    assert first["order"] == 1
    assert second["order"] == 2
    assert third["order"] == 11


async def test_title_length_boundaries(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)

    accepted = await _create_task(client, owner, project["id"], title="x" * 200)
    assert len(accepted["title"]) == 200

    response = await client.post(
        "/api/tasks",
        json={"title": "x" * 201, "priority": "LOW", "project_id": project["id"]},
        headers=owner.headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    payload = response.json()
    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["error"] == "Validation error"
    assert payload["details"]["field"] == "title"


@pytest.mark.parametrize("title", ["", "   ", "<>"])
async def test_blank_titles_are_rejected_naming_the_field(
    client: AsyncClient,
    authenticated_user,
    title: str,
) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)

    response = await client.post(
        "/api/tasks",
        json={"title": title, "priority": "LOW", "project_id": project["id"]},
        headers=owner.headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    payload = response.json()
    assert payload["success"] is False
    assert payload["details"]["field"] == "title"
    assert payload["message"].startswith("title:")


async def test_priority_is_required(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)

    response = await client.post(
        "/api/tasks",
        json={"title": "No priority", "project_id": project["id"]},
        headers=owner.headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["details"]["field"] == "priority"


async def test_text_fields_are_sanitised(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner, name="  <Ops>  ")

    task = await _create_task(client, owner, project["id"], title="  <b>Ship</b> it ", description="<i>now</i>")

    assert project["name"] == "Ops"
    assert task["title"] == "bShip/b it"
    assert task["description"] == "inow/i"


async def test_create_task_in_foreign_project_is_not_found(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    intruder = await authenticated_user()
    project = await _create_project(client, owner)

    response = await client.post(
        "/api/tasks",
        json={"title": "Sneaky", "priority": "LOW", "project_id": project["id"]},
        headers=intruder.headers,
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == "PROJECT_NOT_FOUND"


async def test_unknown_tag_ids_are_a_foreign_key_error(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)

    response = await client.post(
        "/api/tasks",
        json={"title": "Tagged", "priority": "LOW", "project_id": project["id"], "tag_ids": [999]},
        headers=owner.headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    payload = response.json()
    assert payload["code"] == "FOREIGN_KEY_ERROR"
    assert payload["details"]["tag_ids"] == [999]


async def test_tasks_of_other_users_are_not_found(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    intruder = await authenticated_user()
    project = await _create_project(client, owner)
    task = await _create_task(client, owner, project["id"])

    read = await client.get(f"/api/tasks/{task['id']}", headers=intruder.headers)
    update = await client.patch(f"/api/tasks/{task['id']}", json={"title": "Mine"}, headers=intruder.headers)
    delete = await client.delete(f"/api/tasks/{task['id']}", headers=intruder.headers)

    for response in (read, update, delete):
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["code"] == "TASK_NOT_FOUND"

    still_there = await client.get(f"/api/tasks/{task['id']}", headers=owner.headers)
    assert still_there.json()["data"]["title"] == "Draft release notes"


async def test_completion_timestamp_follows_done_transitions(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)
    task = await _create_task(client, owner, project["id"])

    done = await client.patch(f"/api/tasks/{task['id']}", json={"status": "DONE"}, headers=owner.headers)
    assert done.status_code == status.HTTP_200_OK
    completed_at = done.json()["data"]["completed_at"]
    assert completed_at is not None

    still_done = await client.patch(f"/api/tasks/{task['id']}", json={"actual_hours": 2.5}, headers=owner.headers)
    assert still_done.json()["data"]["completed_at"] == completed_at

    reopened = await client.patch(f"/api/tasks/{task['id']}", json={"status": "REVIEW"}, headers=owner.headers)
    assert reopened.json()["data"]["status"] == "REVIEW"
    assert reopened.json()["data"]["completed_at"] is None


async def test_put_is_accepted_as_an_update(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)
    task = await _create_task(client, owner, project["id"])

    response = await client.put(f"/api/tasks/{task['id']}", json={"priority": "URGENT"}, headers=owner.headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["priority"] == "URGENT"


async def test_update_rejects_empty_payload_and_nulls(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)
    task = await _create_task(client, owner, project["id"], deadline="2030-01-01T00:00:00Z")

    empty = await client.patch(f"/api/tasks/{task['id']}", json={}, headers=owner.headers)
    null_title = await client.patch(f"/api/tasks/{task['id']}", json={"title": None}, headers=owner.headers)
    cleared = await client.patch(f"/api/tasks/{task['id']}", json={"deadline": None}, headers=owner.headers)

    assert empty.status_code == status.HTTP_400_BAD_REQUEST
    assert null_title.status_code == status.HTTP_400_BAD_REQUEST
    assert null_title.json()["details"]["field"] == "title"
    assert cleared.status_code == status.HTTP_200_OK
    assert cleared.json()["data"]["deadline"] is None


async def test_tag_ids_fully_replace_existing_tags(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)
    backend = await _create_tag(client, owner, "backend")
    frontend = await _create_tag(client, owner, "frontend")
    urgent = await _create_tag(client, owner, "urgent")
    task = await _create_task(client, owner, project["id"], tag_ids=[backend["id"], frontend["id"]])

    replaced = await client.patch(
        f"/api/tasks/{task['id']}",
        json={"tag_ids": [urgent["id"], backend["id"]]},
        headers=owner.headers,
    )
    assert replaced.status_code == status.HTTP_200_OK
    assert sorted(tag["name"] for tag in replaced.json()["data"]["tags"]) == ["backend", "urgent"]

    cleared = await client.patch(f"/api/tasks/{task['id']}", json={"tag_ids": []}, headers=owner.headers)
    assert cleared.json()["data"]["tags"] == []


async def test_moving_a_task_to_a_foreign_project_is_rejected(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    other = await authenticated_user()
    project = await _create_project(client, owner)
    foreign = await _create_project(client, other, name="Not yours")
    task = await _create_task(client, owner, project["id"])

    response = await client.patch(
        f"/api/tasks/{task['id']}",
        json={"project_id": foreign["id"]},
        headers=owner.headers,
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == "PROJECT_NOT_FOUND"


async def test_delete_task_returns_empty_envelope(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)
    tag = await _create_tag(client, owner, "cleanup")
    task = await _create_task(client, owner, project["id"], tag_ids=[tag["id"]])

    response = await client.delete(f"/api/tasks/{task['id']}", headers=owner.headers)

    assert response.status_code == status.HTTP_200_OK
    payload = response.json()
    assert payload["success"] is True
    assert payload["data"] is None
    missing = await client.get(f"/api/tasks/{task['id']}", headers=owner.headers)
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    tags = await client.get("/api/tags", headers=owner.headers)
    assert [item["name"] for item in tags.json()["data"]] == ["cleanup"]


async def test_list_tasks_filters_sorts_and_paginates(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    other = await authenticated_user()
    website = await _create_project(client, owner)
    mobile = await _create_project(client, owner, name="Mobile")
    done = await _create_task(client, owner, website["id"], title="Ship landing page", priority="LOW")
    await client.patch(f"/api/tasks/{done['id']}", json={"status": "DONE"}, headers=owner.headers)
    await _create_task(client, owner, website["id"], title="Write copy", description="Landing PAGE hero text")
    await _create_task(client, owner, mobile["id"], title="Push notifications", priority="URGENT")
    other_project = await _create_project(client, other)
    await _create_task(client, other, other_project["id"], title="Landing page elsewhere")

    everything = await client.get("/api/tasks", headers=owner.headers)
    payload = everything.json()["data"]
    assert [task["title"] for task in payload["tasks"]] == [
        "Write copy",
        "Push notifications",
        "Ship landing page",
    ]
    assert payload["pagination"] == {"total": 3, "page": 1, "limit": 50, "total_pages": 1}

    first_page = await client.get("/api/tasks", params={"limit": 2}, headers=owner.headers)
    second_page = await client.get("/api/tasks", params={"limit": 2, "page": 2}, headers=owner.headers)
    assert first_page.json()["data"]["pagination"]["total_pages"] == 2
    assert len(first_page.json()["data"]["tasks"]) == 2
    assert [task["title"] for task in second_page.json()["data"]["tasks"]] == ["Ship landing page"]

    searched = await client.get("/api/tasks", params={"search": "landing page"}, headers=owner.headers)
    assert sorted(task["title"] for task in searched.json()["data"]["tasks"]) == [
        "Ship landing page",
        "Write copy",
    ]

    by_status = await client.get("/api/tasks", params={"status": "DONE"}, headers=owner.headers)
    assert [task["title"] for task in by_status.json()["data"]["tasks"]] == ["Ship landing page"]

    by_priority = await client.get("/api/tasks", params={"priority": "URGENT"}, headers=owner.headers)
    assert [task["title"] for task in by_priority.json()["data"]["tasks"]] == ["Push notifications"]

    by_project = await client.get("/api/tasks", params={"project_id": mobile["id"]}, headers=owner.headers)
    assert by_project.json()["data"]["pagination"]["total"] == 1


async def test_limit_above_maximum_is_rejected(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()

    response = await client.get("/api/tasks", params={"limit": 101}, headers=owner.headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["details"]["field"] == "limit"


async def test_bulk_update_reports_each_item(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    other = await authenticated_user()
    project = await _create_project(client, owner)
    first = await _create_task(client, owner, project["id"], title="First")
    second = await _create_task(client, owner, project["id"], title="Second")
    foreign_project = await _create_project(client, other)
    foreign = await _create_task(client, other, foreign_project["id"], title="Foreign")

    response = await client.put(
        "/api/tasks",
        json={
            "tasks": [
                {"id": second["id"], "status": "DONE", "order": 0},
                {"id": foreign["id"], "status": "DONE", "order": 1},
                {"id": first["id"], "status": "IN_PROGRESS", "order": 0},
            ]
        },
        headers=owner.headers,
    )

    assert response.status_code == status.HTTP_200_OK
    payload = response.json()
    assert payload["success"] is False
    result = payload["data"]
    assert result["succeeded"] == 2
    assert result["failed"] == 1
    assert [(item["id"], item["success"]) for item in result["results"]] == [
        (second["id"], True),
        (foreign["id"], False),
        (first["id"], True),
    ]
    assert result["results"][1]["code"] == "TASK_NOT_FOUND"

    moved = (await client.get(f"/api/tasks/{second['id']}", headers=owner.headers)).json()["data"]
    assert moved["status"] == "DONE"
    assert moved["order"] == 0
    assert moved["completed_at"] is not None
    untouched = (await client.get(f"/api/tasks/{foreign['id']}", headers=other.headers)).json()["data"]
    assert untouched["status"] == "TODO"


async def test_bulk_update_success_envelope(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()
    project = await _create_project(client, owner)
    task = await _create_task(client, owner, project["id"])

    response = await client.put(
        "/api/tasks",
        json={"tasks": [{"id": task["id"], "status": "REVIEW", "order": 3}]},
        headers=owner.headers,
    )

    payload = response.json()
    assert payload["success"] is True
    assert payload["message"] == "Tasks updated successfully"
    assert payload["data"]["failed"] == 0


async def test_bulk_update_requires_items(client: AsyncClient, authenticated_user) -> None:
    owner = await authenticated_user()

    response = await client.put("/api/tasks", json={"tasks": []}, headers=owner.headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["details"]["field"] == "tasks"
