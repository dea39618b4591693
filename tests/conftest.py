"""
Pytest configuration and shared fixtures.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
import sqlalchemy as sa
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from prometheus_client import CollectorRegistry
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.api.main import create_app
from src.db import create_schema, create_session_factory, get_test_engine
from src.db.models import QueueItem
from src.observability.metrics import MetricsCollector
from src.queue.codec import JSONCodec
from src.queue.service import QueueService
from src.store import MemoryQueueStore, QueueStore, SQLQueueStore

# Point at PostgreSQL to run the SQL tests against a real server;
# defaults to a throwaway SQLite file per test
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

AgeItem = Callable[..., Awaitable[None]]


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """Get the test database URL."""
    return TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'queue.db'}"


@pytest_asyncio.fixture
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    """Create an async database engine with an empty queue table."""
    engine = get_test_engine(database_url)
    await create_schema(engine)

    async with engine.begin() as conn:
        await conn.execute(sa.delete(QueueItem))

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory for the test engine."""
    return create_session_factory(async_engine)


@pytest.fixture
def registry() -> CollectorRegistry:
    """Private Prometheus registry."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> MetricsCollector:
    """Metrics collector on a private registry."""
    return MetricsCollector(registry=registry)


@pytest.fixture
def memory_store() -> MemoryQueueStore:
    """Create an in-memory store."""
    return MemoryQueueStore()


@pytest.fixture
def sql_store(session_factory: async_sessionmaker[AsyncSession]) -> SQLQueueStore:
    """Create a SQL store on the test database."""
    return SQLQueueStore(session_factory)


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest) -> QueueStore:
    """Each store backend in turn."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def queue(store: QueueStore, metrics: MetricsCollector) -> QueueService:
    """Queue service over each store backend."""
    return QueueService(store, metrics=metrics)


@pytest.fixture
def age_item(store: QueueStore, request: pytest.FixtureRequest) -> AgeItem:
    """
    Overwrite timestamp columns of a stored row.

    Returns an async callable taking the row id and column values.
    """
    factory = None
    if not isinstance(store, MemoryQueueStore):
        factory = request.getfixturevalue("session_factory")

    async def _age(item_id: int, **fields: Any) -> None:
        if factory is None:
            store.touch(item_id, **fields)
            return

        async with factory() as session, session.begin():
            await session.execute(
                sa.update(QueueItem).where(QueueItem.id == item_id).values(**fields)
            )

    return _age


@pytest.fixture
def api_service(metrics: MetricsCollector) -> QueueService:
    """JSON-codec queue service for the HTTP tests."""
    return QueueService(MemoryQueueStore(), codec=JSONCodec(), metrics=metrics)


@pytest.fixture
def app(api_service: QueueService) -> FastAPI:
    """Create a FastAPI app bound to the in-memory queue service."""
    return create_app(queue_service=api_service)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
