import bcrypt
import pytest
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from src.domain.entities import Permission, Role, User


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_identifier = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.update = AsyncMock(side_effect=lambda user: user)

    uow.roles = MagicMock()
    uow.roles.get_with_permissions = AsyncMock(return_value=None)

    uow.sessions = MagicMock()
    uow.sessions.get_by_id = AsyncMock(return_value=None)
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.compare_and_swap_secret = AsyncMock(return_value=True)
    uow.sessions.revoke_by_id = AsyncMock(return_value=True)
    uow.sessions.revoke_all_by_user_id = AsyncMock(return_value=0)
    uow.sessions.list_active = AsyncMock(return_value=[])

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()

    return uow


@pytest.fixture
def sales_role():
    return Role(
        id=2,
        name="sales",
        permissions=[
            Permission(role_id=2, action="read", subject="SaleOrder"),
            Permission(role_id=2, action="create", subject="Customer"),
        ],
    )


@pytest.fixture
def active_user():
    """Sales user whose password is demo123"""
    password_hash = bcrypt.hashpw(b"demo123", bcrypt.gensalt(4))
    return User(
        id=uuid4(),
        name="Sales User",
        email="sales@x.com",
        username="sales",
        employee_code="SAL001",
        password_hash=password_hash.decode(),
        role_id=2,
    )
