from __future__ import annotations

from datetime import timedelta

from fastapi import status
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from taskboard.app.core.config import get_settings
from taskboard.app.core.security import create_session_token, decode_session_token


async def test_signup_returns_user_and_tokens(client: AsyncClient) -> None:
    response = await client.post(
        "/api/auth/signup",
        json={"email": "Ada@Example.com", "password": "CorrectHorse1", "name": "Ada"},
    )

    assert response.status_code == status.HTTP_201_CREATED
    payload = response.json()
    assert payload["success"] is True
    data = payload["data"]
    assert data["user"]["email"] == "ada@example.com"
    assert data["user"]["name"] == "Ada"
    assert data["tokens"]["token_type"] == "bearer"
    assert data["tokens"]["expires_in"] > 0

    claims = decode_session_token(data["tokens"]["access_token"], get_settings())
    assert claims["sub"] == str(data["user"]["id"])
    assert claims["jti"]


async def test_signup_rejects_duplicate_email(client: AsyncClient) -> None:
    body = {"email": "dup@example.com", "password": "CorrectHorse1"}
    first = await client.post("/api/auth/signup", json=body)
    second = await client.post("/api/auth/signup", json={**body, "email": "DUP@example.com"})

    assert first.status_code == status.HTTP_201_CREATED
    assert second.status_code == status.HTTP_409_CONFLICT
    assert second.json()["code"] == "DUPLICATE_RECORD"


async def test_signup_validates_password_length(client: AsyncClient) -> None:
    response = await client.post("/api/auth/signup", json={"email": "short@example.com", "password": "short"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["details"]["field"] == "password"


async def test_login_and_current_user(client: AsyncClient, authenticated_user) -> None:
    user = await authenticated_user(name="Grace")

    response = await client.get("/api/users/me", headers=user.headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] == {
        "id": user.id,
        "email": user.email,
        "name": "Grace",
        "image": None,
    }


async def test_login_with_wrong_password_is_unauthorized(client: AsyncClient, authenticated_user) -> None:
    user = await authenticated_user(login=False)

    response = await client.post("/api/auth/login", data={"username": user.email, "password": "wrong-password"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == "Incorrect email or password."


async def test_expired_token_is_unauthorized(client: AsyncClient, authenticated_user) -> None:
    user = await authenticated_user(login=False)
    token = create_session_token(subject=user.id, settings=get_settings(), expires_delta=timedelta(seconds=-5))

    response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token.token}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "UNAUTHORIZED"


async def test_token_for_deleted_user_is_unauthorized(client: AsyncClient) -> None:
    token = create_session_token(subject=4242, settings=get_settings())

    response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token.token}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


async def test_inactive_account_cannot_log_in(client: AsyncClient, authenticated_user, session: AsyncSession) -> None:
    user = await authenticated_user(login=False)
    user.user.is_active = False
    session.add(user.user)
    await session.commit()

    response = await client.post("/api/auth/login", data={"username": user.email, "password": user.password})

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "FORBIDDEN"
