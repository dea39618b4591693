"""
Unit tests for the SQL store adapter.
"""

from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db import create_session_factory, get_test_engine
from src.db.models import QueueItem
from src.exceptions import StoreError
from src.store import SQLQueueStore, utcnow


class TestSQLQueueStore:
    """Tests for SQLQueueStore."""

    @pytest_asyncio.fixture
    async def seeded(self, sql_store: SQLQueueStore) -> list[int]:
        """Insert three rows into the orders queue."""
        return [await sql_store.insert("orders", f"item-{i}".encode()) for i in range(3)]

    async def test_insert_defaults(
        self,
        sql_store: SQLQueueStore,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        """Test new rows start unclaimed and unprocessed."""
        item_id = await sql_store.insert("orders", b"payload")

        async with session_factory() as session:
            item = await session.get(QueueItem, item_id)

        assert item.queue_name == "orders"
        assert item.data == b"payload"
        assert item.processed is False
        assert item.token is None
        assert item.claimed_at is None
        assert item.created_at is not None

    async def test_ids_increase(self, seeded: list[int]):
        """Test insertion order is id order."""
        assert seeded == sorted(seeded)
        assert len(set(seeded)) == 3

    async def test_claim_takes_oldest(self, sql_store: SQLQueueStore, seeded: list[int]):
        """Test the conditional update stamps the lowest id first."""
        first = await sql_store.claim_next("orders", "a" * 40)
        second = await sql_store.claim_next("orders", "b" * 40)

        assert first.id == seeded[0]
        assert first.token == "a" * 40
        assert first.claimed_at is not None
        assert second.id == seeded[1]

    async def test_claim_empty_queue(self, sql_store: SQLQueueStore):
        """Test claiming from an empty queue finds nothing."""
        assert await sql_store.claim_next("orders", "a" * 40) is None

    async def test_claim_respects_queue_name(self, sql_store: SQLQueueStore, seeded: list[int]):
        """Test rows of other queues are never claimed."""
        assert await sql_store.claim_next("emails", "a" * 40) is None
        assert await sql_store.count_pending("orders") == 3

    async def test_claimed_row_not_claimable_again(self, sql_store: SQLQueueStore):
        """Test a second attempt cannot overwrite an existing token."""
        await sql_store.insert("orders", b"only")

        winner = await sql_store.claim_next("orders", "a" * 40)
        loser = await sql_store.claim_next("orders", "b" * 40)

        assert winner is not None
        assert loser is None
        assert await sql_store.find_claimed("orders", "a" * 40) is not None

    async def test_mark_processed_requires_token(self, sql_store: SQLQueueStore, seeded: list[int]):
        """Test only the claim owner can mark a row processed."""
        item = await sql_store.claim_next("orders", "a" * 40)

        assert await sql_store.mark_processed(item.id, "b" * 40) is False
        assert await sql_store.mark_processed(item.id, "a" * 40) is True
        assert await sql_store.find_claimed("orders", "a" * 40) is None

    async def test_processed_row_keeps_token(
        self,
        sql_store: SQLQueueStore,
        session_factory: async_sessionmaker[AsyncSession],
        seeded: list[int],
    ):
        """Test processed rows always carry the token that claimed them."""
        item = await sql_store.claim_next("orders", "a" * 40)
        await sql_store.mark_processed(item.id, "a" * 40)

        async with session_factory() as session:
            result = await session.execute(
                select(QueueItem).where(QueueItem.processed.is_(True))
            )
            rows = result.scalars().all()

        assert [row.id for row in rows] == [seeded[0]]
        assert rows[0].token == "a" * 40

    async def test_pending_by_queue(self, sql_store: SQLQueueStore, seeded: list[int]):
        """Test pending counts skip claimed rows."""
        await sql_store.insert("emails", b"x")
        await sql_store.claim_next("orders", "a" * 40)

        assert await sql_store.pending_by_queue() == {"orders": 2, "emails": 1}

    async def test_ping(self, sql_store: SQLQueueStore):
        """Test a reachable database answers ping."""
        assert await sql_store.ping() is True


class TestSQLQueueStoreErrors:
    """Tests for store error translation."""

    @pytest_asyncio.fixture
    async def broken_store(self, tmp_path: Path):
        """Store pointing at a database file that cannot be opened."""
        engine = get_test_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'queue.db'}"
        )
        yield SQLQueueStore(create_session_factory(engine))
        await engine.dispose()

    async def test_insert_raises_store_error(self, broken_store: SQLQueueStore):
        """Test driver failures surface as StoreError."""
        with pytest.raises(StoreError) as exc_info:
            await broken_store.insert("orders", b"x")

        assert exc_info.value.__cause__ is not None

    async def test_cleanup_raises_store_error(self, broken_store: SQLQueueStore):
        """Test delete failures surface as StoreError."""
        with pytest.raises(StoreError):
            await broken_store.delete_processed(utcnow())

    async def test_ping_reports_failure(self, broken_store: SQLQueueStore):
        """Test ping returns False instead of raising."""
        assert await broken_store.ping() is False
