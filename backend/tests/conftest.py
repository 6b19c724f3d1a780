"""
Notekeeper Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock AsyncSession (service unit tests, no DB)
    ├── credentials: CredentialService with a test secret and cheap bcrypt
    ├── db_schema: Empty users/notes tables in a temporary SQLite file
    ├── db_session: Real AsyncSession against that file
    ├── test_client: HTTPX AsyncClient wired to the FastAPI app
    └── register_user: Factory that signs up + logs in, returns auth headers
"""

import os
import tempfile

# Override settings for testing BEFORE any notekeeper imports:
# the settings singleton and the engine are built at import time
_TEST_DIR = tempfile.mkdtemp(prefix="notekeeper_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-0123456789abcdef"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notekeeper.database import Base, async_session_factory, engine
from notekeeper.services.credential_service import CredentialService


# ══════════════════════════════════════════════════════════════════════════
# Unit-test Fixtures (no database)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_note(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
            result = await note_service.get_note(mock_db_session, user_id, note_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def credentials():
    """CredentialService isolated from the app's settings."""
    return CredentialService(secret="unit-test-secret", expire_hours=720, bcrypt_rounds=4)


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures (temporary SQLite file)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_schema():
    """
    Fresh, empty tables for one test.

    The engine is disposed afterwards so no pooled connection outlives the
    test's event loop.
    """
    import notekeeper.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_schema):
    """A real AsyncSession; tests commit explicitly when they need to."""
    async with async_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(db_schema):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport does not run the lifespan; `db_schema` creates the tables.
    """
    from notekeeper.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def register_user(test_client):
    """
    Factory: sign up and log in a user, return bearer auth headers.

    Usage:
        headers = await register_user("a@x.com")
        await test_client.get("/notes", headers=headers)
    """
    async def _register(email: str = "a@x.com", password: str = "pw", name: str = "A") -> dict:
        r = await test_client.post(
            "/signup", json={"name": name, "email": email, "password": password}
        )
        assert r.status_code == 201, r.text
        r = await test_client.post("/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _register
