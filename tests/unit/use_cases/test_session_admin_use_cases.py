"""
Unit tests for the admin session views and force logout
"""

import pytest
from datetime import timedelta
from uuid import uuid4

from src.app.use_cases.sessions import (
    GetAuthStatsUseCase,
    ListActiveSessionsUseCase,
    RevokeUserSessionsUseCase,
)
from src.domain.clock import utc_now
from src.domain.entities import Role, Session, User


def user_with_role(name, role_name):
    user = User(id=uuid4(), name=name, email=f"{name}@x.com", password_hash="hash")
    user.role = Role(id=1, name=role_name) if role_name else None
    return user


def session_for(user, minutes_ago, rotated=False):
    issued = utc_now() - timedelta(minutes=minutes_ago)
    return Session(
        id=uuid4(),
        user_id=user.id,
        refresh_token_hash="digest",
        issued_at=issued,
        expires_at=issued + timedelta(days=7),
        last_rotated_at=utc_now() if rotated else None,
    )


@pytest.mark.asyncio
async def test_list_active_sessions(mock_uow):
    admin = user_with_role("admin", "admin")
    sales = user_with_role("sales", "sales")
    rows = [(session_for(sales, 1, rotated=True), sales), (session_for(admin, 30), admin)]
    mock_uow.sessions.list_active.return_value = rows

    result = await ListActiveSessionsUseCase(mock_uow).execute()

    assert result.is_ok()
    data = result.value
    assert data.total_active_sessions == 2
    assert [s.user_name for s in data.sessions] == ["sales", "admin"]
    assert data.sessions[0].state == "refreshed"
    assert data.sessions[1].state == "authenticated"
    assert data.sessions[0].role == "sales"
    assert mock_uow.sessions.list_active.await_args.args[1] is None


@pytest.mark.asyncio
async def test_list_active_sessions_for_one_user(mock_uow):
    target = uuid4()

    result = await ListActiveSessionsUseCase(mock_uow).execute(target)

    assert result.is_ok()
    assert result.value.total_active_sessions == 0
    assert mock_uow.sessions.list_active.await_args.args[1] == target


@pytest.mark.asyncio
async def test_auth_stats(mock_uow):
    admin = user_with_role("admin", "admin")
    sales = user_with_role("sales", "sales")
    orphan = user_with_role("orphan", None)
    newest = session_for(sales, 0, rotated=True)
    mock_uow.sessions.list_active.return_value = [
        (newest, sales),
        (session_for(sales, 10), sales),
        (session_for(admin, 20), admin),
        (session_for(orphan, 30), orphan),
    ]

    result = await GetAuthStatsUseCase(mock_uow).execute()

    assert result.is_ok()
    stats = result.value
    assert stats.total_active_sessions == 4
    assert stats.active_users == 3
    assert stats.sessions_by_role == {"sales": 2, "admin": 1, "Unknown": 1}
    assert stats.last_activity == newest.last_activity


@pytest.mark.asyncio
async def test_auth_stats_empty(mock_uow):
    result = await GetAuthStatsUseCase(mock_uow).execute()

    assert result.is_ok()
    assert result.value.total_active_sessions == 0
    assert result.value.last_activity is None


@pytest.mark.asyncio
async def test_force_logout_revokes_every_session(mock_uow, active_user):
    admin_id = uuid4()
    mock_uow.users.get_by_id.return_value = active_user
    mock_uow.sessions.revoke_all_by_user_id.return_value = 2

    result = await RevokeUserSessionsUseCase(mock_uow).execute(active_user.id, admin_id)

    assert result.is_ok()
    assert result.value.revoked_count == 2
    assert result.value.user_id == str(active_user.id)
    assert mock_uow.sessions.revoke_all_by_user_id.await_args.args[1] == "force_logout"

    event = mock_uow.audit_events.create.await_args.args[0]
    assert event.action == "force_logout"
    assert event.user_id == admin_id
    assert event.event_metadata["target_user_id"] == str(active_user.id)
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_force_logout_unknown_user(mock_uow):
    result = await RevokeUserSessionsUseCase(mock_uow).execute(uuid4(), uuid4())

    assert result.is_err()
    assert result.error.code == "USER_NOT_FOUND"
    mock_uow.sessions.revoke_all_by_user_id.assert_not_awaited()
