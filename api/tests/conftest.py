"""Shared test fixtures."""

import os
import tempfile

# Must be set before padelbook.core.config is imported
os.environ.setdefault(
    "PB_DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'padelbook_test.db')}"
)
os.environ.setdefault("PB_SECRET_KEY", "test-secret")
os.environ.setdefault("PB_SEND_CONFIRMATION_EMAILS", "false")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from padelbook.core.database import async_session_factory, engine  # noqa: E402
from padelbook.main import app  # noqa: E402
from padelbook.models import Base  # noqa: E402


@pytest.fixture
async def fresh_database():
    """Dispose stale pool connections and recreate the schema.

    The global engine is created at import time. When pytest-asyncio creates a new
    event loop for a test, pooled connections bound to the old loop would fail, so
    the pool is disposed first.
    """
    await engine.dispose()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def db(fresh_database):
    async with async_session_factory() as session:
        yield session


@pytest.fixture
async def client(fresh_database):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
