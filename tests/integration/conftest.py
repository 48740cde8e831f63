from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.app import create_app
from src.depends import get_unit_of_work
from src.domain.entities import AuditEvent, Session
from tests.fixtures.json_loader import TestDataLoader, seed_database


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def test_data():
    return TestDataLoader()


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def users(db_session):
    """Seeded users keyed by email"""
    return await seed_database(db_session)


@pytest_asyncio.fixture
async def client(session_factory, users):
    app = create_app(ApplicationConfig)

    # One session per request, like the production dependency
    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def login(client):
    async def _login(identifier="sales@x.com", password="demo123", device_label=None):
        body = {"identifier": identifier, "password": password}
        if device_label:
            body["deviceLabel"] = device_label
        response = await client.post("/auth/login", json=body)
        assert response.status_code == 200, response.text
        return response.json()

    return _login


@pytest.fixture
def stored_session(session_factory):
    """Fresh read of a session row, bypassing any request's identity map"""

    async def _get(session_id):
        async with session_factory() as session:
            stmt = select(Session).where(Session.id == UUID(str(session_id)))
            result = await session.exec(stmt)
            return result.one_or_none()

    return _get


@pytest.fixture
def audit_actions(session_factory):
    async def _actions():
        async with session_factory() as session:
            result = await session.exec(select(AuditEvent).order_by(AuditEvent.created_at))
            return [event.action for event in result.all()]

    return _actions
