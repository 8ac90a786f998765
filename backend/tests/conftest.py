"""
SnipShare — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (real SQLite database, HTTP
       clients with their own cookie jars, account helpers).
How:   Environment overrides are applied BEFORE any snipshare import, because
       settings and the engine are module-level singletons.

Fixture Hierarchy (all function-scoped):
    database          creates every table, drops them afterwards
    ├── db_session    AsyncSession for service-level tests
    ├── test_client   HTTPX AsyncClient talking to the app (browser #1)
    └── other_client  second client with a separate cookie jar (browser #2)

    signup            async helper: register (and optionally log in) a user
    find_user         async helper: load a user with its owned-id list
    find_snippet      async helper: load a snippet by title
    mock_db_session   AsyncMock session for failure injection
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any snipshare imports
_TEST_DIR = tempfile.mkdtemp(prefix="snipshare_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["ENVIRONMENT"] = "development"
os.environ["SESSION_SECRET"] = "test-session-secret-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"  # Minimum work factor keeps the suite fast
os.environ["RATE_LIMIT_REQUESTS"] = "10000"  # The app instance is shared by every test
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402

from snipshare.database import Base, async_session_factory, engine  # noqa: E402
from snipshare.models import Snippet, User  # noqa: E402

PASSWORD = "correct-horse-battery"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """Fresh schema per test: create_all before, drop_all after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session(database):
    """
    A real AsyncSession for service tests.

    Services only flush; nothing is committed, and the session is rolled
    back when the test ends.
    """
    async with async_session_factory() as session:
        yield session
        await session.rollback()


# ══════════════════════════════════════════════════════════════════════════
# HTTP Clients
# ══════════════════════════════════════════════════════════════════════════

def _client() -> AsyncClient:
    from snipshare.main import app
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://testserver")


@pytest_asyncio.fixture
async def test_client(database):
    """
    Provides an async HTTP test client for endpoint testing.

    Redirects are NOT followed, so tests can assert on the 303 and its
    Location header. The client keeps the session cookie between requests.
    """
    async with _client() as client:
        yield client


@pytest_asyncio.fixture
async def other_client(database):
    """A second browser: same app, separate cookies."""
    async with _client() as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def signup():
    """
    Register a user through the real routes, optionally logging in.

    Usage:
        await signup(test_client, "alice_dev")
    """
    async def _signup(client, username, password=PASSWORD, login=True):
        response = await client.post(
            "/createUser",
            data={
                "username": username,
                "password": password,
                "confirm_password": password,
            },
        )
        assert response.status_code == 303, response.text
        if login:
            response = await client.post(
                "/login", data={"username": username, "password": password}
            )
            assert response.status_code == 303, response.text
            assert response.headers["location"] == "/profile"
        return response

    return _signup


@pytest.fixture
def find_user():
    async def _find(username):
        async with async_session_factory() as session:
            result = await session.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()

    return _find


@pytest.fixture
def find_snippet():
    async def _find(title):
        async with async_session_factory() as session:
            result = await session.execute(select(Snippet).where(Snippet.title == title))
            return result.scalar_one_or_none()

    return _find


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for failure-injection tests.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session
