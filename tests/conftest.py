"""Test fixtures — a fresh database and app per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own engine and schema. By default that's an
   in-memory SQLite database (aiosqlite) with foreign keys switched on,
   so ON DELETE CASCADE behaves like PostgreSQL. Point
   TASKBOARD_TEST_DATABASE_URL at a PostgreSQL database to run the same
   tests there.
2. The app is built with create_app(test_settings) — no environment
   needed — and get_db is overridden to hand out sessions bound to the
   test engine, one per request, just like production.
3. Auth is NOT mocked: tests sign up and log in through the API and send
   real bearer tokens, so ownership checks run end to end.
"""

import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from taskboard.config import Settings
from taskboard.db.engine import get_db
from taskboard.db.models import Base
from taskboard.main import create_app

TEST_DB_URL = os.environ.get("TASKBOARD_TEST_DATABASE_URL", "sqlite+aiosqlite://")

TEST_PASSWORD = "Sup3rSecret"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": TEST_DB_URL,
        "jwt_secret": "test-jwt-secret-0123456789abcdefghij",
        "session_secret": "test-session-secret-0123456789abcdef",
        "google_client_id": "test-client-id",
        "google_client_secret": "test-client-secret",
        "frontend_url": "http://frontend.test",
        "backend_url": "http://backend.test",
        "environment": "development",
        "bcrypt_rounds": 4,  # fast hashing in tests
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest_asyncio.fixture()
async def engine():
    """Per-test engine with the schema created from the models."""
    if TEST_DB_URL.startswith("sqlite"):
        engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    else:
        engine = create_async_engine(TEST_DB_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Session for service-level tests and for poking at the DB directly."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def app(settings, session_factory):
    app = create_app(settings)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()
    await app.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def login_as(client):
    """Factory: sign up + log in a fresh user, return auth headers."""

    async def _login(email=None, password=TEST_PASSWORD):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post("/api/auth/signup", json={"email": email, "password": password})
        assert r.status_code == 201, r.text
        r = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _login


@pytest_asyncio.fixture()
async def auth_headers(login_as):
    """User A."""
    return await login_as()


@pytest_asyncio.fixture()
async def other_headers(login_as):
    """User B — for ownership isolation tests."""
    return await login_as()


@pytest_asyncio.fixture()
async def board(client, auth_headers):
    r = await client.post("/api/boards", json={"name": "Home"}, headers=auth_headers)
    assert r.status_code == 201
    return r.json()
