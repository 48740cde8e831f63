import asyncio
from datetime import timedelta
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlmodel import update

from src.domain.clock import utc_now
from src.domain.entities import Session, User


async def refresh(client, refresh_token):
    return await client.post("/auth/refresh", json={"refreshToken": refresh_token})


@pytest.mark.asyncio
async def test_successful_token_refresh(client: AsyncClient, login, stored_session, audit_actions):
    """Successful Token Refresh

    Given I have a valid refresh token
    When I submit the refresh token
    Then I receive a new access token and a new refresh token
    And the session's version moves forward
    And an AuditEvent with action=token_refresh is recorded
    """
    tokens = await login()
    before = await stored_session(tokens["sessionId"])

    response = await refresh(client, tokens["refreshToken"])

    assert response.status_code == 200
    data = response.json()
    assert data["sessionId"] == tokens["sessionId"]
    assert data["refreshToken"] != tokens["refreshToken"]
    assert data["tokenType"] == "Bearer"

    after = await stored_session(tokens["sessionId"])
    assert after.version == before.version + 1
    assert after.last_rotated_at is not None
    # Rotation never extends the absolute expiry
    assert after.expires_at == before.expires_at

    assert "token_refresh" in await audit_actions()


@pytest.mark.asyncio
async def test_rotated_token_replay_revokes_session(
    client: AsyncClient, login, stored_session, audit_actions
):
    """Refresh Token Reuse

    Given I logged in and received R1
    And refreshing with R1 gave me R2
    When R1 is presented again
    Then the request fails with TOKEN_REUSED
    And the session is revoked, so R2 fails too
    """
    r1 = (await login())["refreshToken"]
    r2 = (await refresh(client, r1)).json()["refreshToken"]

    replay = await refresh(client, r1)
    assert replay.status_code == 401
    assert replay.json()["error"]["code"] == "TOKEN_REUSED"

    after_reuse = await refresh(client, r2)
    assert after_reuse.status_code == 401
    assert after_reuse.json()["error"]["code"] == "SESSION_REVOKED"

    # Further replays of the stale token keep reporting reuse
    again = await refresh(client, r1)
    assert again.json()["error"]["code"] == "TOKEN_REUSED"

    session = await stored_session(r1.split(".", 1)[0])
    assert session.revoked is True
    assert session.revoked_reason == "token_reuse"
    assert "token_reuse_detected" in await audit_actions()


@pytest.mark.asyncio
async def test_concurrent_refresh_with_same_token(client: AsyncClient, login, stored_session):
    """Concurrent Rotation

    Given one refresh token
    When it is presented by several requests at once
    Then exactly one succeeds
    And every other request is treated as reuse
    """
    tokens = await login()

    responses = await asyncio.gather(
        *(refresh(client, tokens["refreshToken"]) for _ in range(5))
    )

    statuses = sorted(r.status_code for r in responses)
    assert statuses == [200, 401, 401, 401, 401]
    for r in responses:
        if r.status_code == 401:
            assert r.json()["error"]["code"] == "TOKEN_REUSED"

    session = await stored_session(tokens["sessionId"])
    assert session.revoked is True
    assert session.version == 2


@pytest.mark.asyncio
async def test_sequential_refreshes_chain(client: AsyncClient, login, stored_session):
    """Monotonic Rotation

    Given I rotated my refresh token three times
    When any of the three earlier tokens is presented
    Then every one of them fails with TOKEN_REUSED
    And the newest token dies with the session
    """
    tokens = await login()
    chain = [tokens["refreshToken"]]

    for _ in range(3):
        response = await refresh(client, chain[-1])
        assert response.status_code == 200
        chain.append(response.json()["refreshToken"])

    session = await stored_session(tokens["sessionId"])
    assert session.version == 4
    assert session.revoked is False

    for stale in chain[:-1]:
        replay = await refresh(client, stale)
        assert replay.status_code == 401
        assert replay.json()["error"]["code"] == "TOKEN_REUSED"

    newest = await refresh(client, chain[-1])
    assert newest.json()["error"]["code"] == "SESSION_REVOKED"

    session = await stored_session(tokens["sessionId"])
    assert session.version == 4
    assert session.revoked_reason == "token_reuse"


@pytest.mark.asyncio
async def test_refresh_after_logout(client: AsyncClient, login):
    """Revoked Session

    Given my session has been logged out
    When I attempt to refresh
    Then the request fails with 401 SESSION_REVOKED
    """
    tokens = await login()
    await client.post(
        "/auth/logout",
        json={"refreshToken": tokens["refreshToken"]},
        headers={"Authorization": f"Bearer {tokens['accessToken']}"},
    )

    response = await refresh(client, tokens["refreshToken"])

    assert response.status_code == 401
    assert response.json()["error"] == {
        "code": "SESSION_REVOKED",
        "message": "Authentication failed",
    }


@pytest.mark.asyncio
async def test_refresh_expired_session(client: AsyncClient, login, session_factory):
    tokens = await login()
    async with session_factory() as db:
        await db.execute(
            update(Session)
            .where(Session.id == UUID(tokens["sessionId"]))
            .values(expires_at=utc_now() - timedelta(seconds=1))
        )
        await db.commit()

    response = await refresh(client, tokens["refreshToken"])

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "refresh_token",
    [
        "garbage",
        "00000000-0000-4000-8000-000000000000.secret",
    ],
)
async def test_refresh_invalid_token(client: AsyncClient, refresh_token):
    response = await refresh(client, refresh_token)

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_INVALID"


@pytest.mark.asyncio
async def test_refresh_forged_secret_for_live_session_revokes_it(
    client: AsyncClient, login, stored_session
):
    tokens = await login()

    response = await refresh(client, f"{tokens['sessionId']}.not-the-secret")

    assert response.json()["error"]["code"] == "TOKEN_REUSED"
    assert (await stored_session(tokens["sessionId"])).revoked is True


@pytest.mark.asyncio
async def test_refresh_missing_body(client: AsyncClient):
    response = await client.post("/auth/refresh", json={})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_refresh_for_deactivated_user(client: AsyncClient, login, users, session_factory):
    tokens = await login()
    user = users["sales@x.com"]
    async with session_factory() as db:
        db_user = await db.get(User, user.id)
        db_user.active = False
        db.add(db_user)
        await db.commit()

    response = await refresh(client, tokens["refreshToken"])

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "SESSION_REVOKED"


@pytest.mark.asyncio
async def test_login_refresh_replay_validate(client: AsyncClient):
    """Rotation Round Trip

    Given I log in as admin@x.com
    When I refresh, then replay the original refresh token
    Then the replay fails with TOKEN_REUSED
    And the newest access token still validates
    """
    login = await client.post(
        "/auth/login", json={"identifier": "admin@x.com", "password": "demo123"}
    )
    assert login.status_code == 200
    original = login.json()

    refreshed = await refresh(client, original["refreshToken"])
    assert refreshed.status_code == 200
    newest = refreshed.json()
    assert newest["refreshToken"] != original["refreshToken"]

    replay = await refresh(client, original["refreshToken"])
    assert replay.status_code == 401
    assert replay.json()["error"]["code"] == "TOKEN_REUSED"

    validate = await client.get(
        "/auth/validate", headers={"Authorization": f"Bearer {newest['accessToken']}"}
    )
    assert validate.status_code == 200
    assert validate.json()["isValid"] is True
