"""
HTMLVault Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for service unit tests (no database)
    ├── test_settings:   Settings pointing at a throwaway SQLite file
    ├── database:        Database handle on that file, disposed after the test
    ├── test_app:        create_app() wired to test_settings + database
    └── test_client:     HTTPX AsyncClient with the app's lifespan running
"""

import os

# Must be set before htmlvault.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["DB_SSL"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ENVIRONMENT"] = "test"

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from htmlvault.config import Settings
from htmlvault.database import Database
from htmlvault.main import create_app


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.mappings.return_value.one_or_none.return_value = row
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_row():
    """Row mapping as returned by the content SELECT."""
    now = datetime.now(timezone.utc)
    return {
        "id": 1,
        "title": "Doc",
        "html_content": "<p>hi</p>",
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'htmlvault.db'}",
        db_ssl=False,
        environment="development",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    db = Database.from_settings(test_settings)
    yield db
    await db.dispose()


@pytest.fixture
def test_app(test_settings, database):
    return create_app(test_settings, database)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    ASGITransport does not send lifespan events, so the lifespan context is
    entered explicitly; that is what creates the table.
    raise_app_exceptions=False lets 500 responses from the catch-all handler
    reach the test instead of re-raising.
    """
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
