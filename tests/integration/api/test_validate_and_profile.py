from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient

from src.api.utils.jwt import create_access_token


@pytest.mark.asyncio
async def test_validate_access_token(client: AsyncClient, login, users):
    tokens = await login("admin@x.com")

    response = await client.get(
        "/auth/validate", headers={"Authorization": f"Bearer {tokens['accessToken']}"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["isValid"] is True
    assert data["claims"]["userId"] == str(users["admin@x.com"].id)
    assert data["claims"]["roleName"] == "admin"
    assert data["claims"]["sessionId"] == tokens["sessionId"]
    assert len(data["claims"]["permissionsDigest"]) == 64


@pytest.mark.asyncio
async def test_validate_expired_access_token(client: AsyncClient, users):
    token, _ = create_access_token(
        str(users["sales@x.com"].id),
        "sales",
        "digest",
        timedelta(minutes=15),
        now=datetime.now(UTC) - timedelta(hours=1),
    )

    response = await client.get("/auth/validate", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers, code",
    [
        ({}, "UNAUTHENTICATED"),
        ({"Authorization": "Bearer not-a-jwt"}, "TOKEN_INVALID"),
        ({"Authorization": "Basic dXNlcjpwYXNz"}, "UNAUTHENTICATED"),
    ],
)
async def test_validate_rejects_bad_headers(client: AsyncClient, headers, code):
    response = await client.get("/auth/validate", headers=headers)

    assert response.status_code == 401
    assert response.json()["error"] == {"code": code, "message": "Authentication failed"}


@pytest.mark.asyncio
async def test_profile(client: AsyncClient, login):
    tokens = await login("admin")

    response = await client.get(
        "/auth/profile", headers={"Authorization": f"Bearer {tokens['accessToken']}"}
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["email"] == "admin@x.com"
    assert user["username"] == "admin"
    assert user["employeeCode"] == "ADM001"
    assert user["active"] is True
    assert user["lastLoginAt"] is not None
    assert user["role"]["name"] == "admin"
    assert {"action": "read", "subject": "all"} in user["role"]["permissions"]


@pytest.mark.asyncio
async def test_profile_requires_authentication(client: AsyncClient):
    response = await client.get("/auth/profile")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/auth/health")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["service"] == "auth"
    assert "timestamp" in data
