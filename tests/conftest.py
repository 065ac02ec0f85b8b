"""Shared test fixtures for all test groups."""

import pytest
from fakeredis import FakeAsyncRedis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from alignment_engine.db.base import Base
from fakes import (
    InMemoryExecutionLogStore,
    InMemoryMetricStore,
    InMemoryReflections,
    RecordingCache,
    RecordingNotifier,
)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
async def redis():
    """Provide fakeredis async client."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
async def session_factory():
    """In-memory SQLite database with all tables created.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    import alignment_engine.db.models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def execution_logs():
    return InMemoryExecutionLogStore()


@pytest.fixture
def metric_store():
    return InMemoryMetricStore()


@pytest.fixture
def reflections():
    return InMemoryReflections()


@pytest.fixture
def cache():
    return RecordingCache()


@pytest.fixture
def notifier():
    return RecordingNotifier()
