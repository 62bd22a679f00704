"""
DayNotes Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Inventory:
    ├── fixed_clock:   Deterministic epoch-millisecond clock
    ├── memory_store:  Empty MemoryStore
    ├── store:         Parametrized over MemoryStore and SQLStore (SQLite file)
    ├── repository:    NoteRepository over `store` with `fixed_clock`
    └── test_client:   HTTPX AsyncClient wired to an app serving `memory_store`
"""

import os

# Must be set before any daynotes import reads settings
os.environ["STORE_BACKEND"] = "memory"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["STORE_RETRY_MIN_WAIT"] = "0"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine

from daynotes.database import build_session_factory
from daynotes.services.note_repository import NoteRepository
from daynotes.store.memory import MemoryStore
from daynotes.store.sql import SQLStore

FIXED_NOW = 1_710_000_000_000


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store(request, tmp_path):
    """
    Each test using this fixture runs once per backend.

    The SQL variant uses a throwaway SQLite file with the schema created
    through SQLStore.initialize().
    """
    if request.param == "memory":
        yield MemoryStore()
        return

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    sql_store = SQLStore(build_session_factory(engine), engine=engine, create_schema=True)
    await sql_store.initialize()
    yield sql_store
    await sql_store.close()


@pytest.fixture
def repository(store, fixed_clock):
    return NoteRepository(store, clock=fixed_clock)


@pytest_asyncio.fixture
async def test_client(memory_store):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from daynotes.main import create_app

    app = create_app(store=memory_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
