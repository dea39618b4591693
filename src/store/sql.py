"""
SQLAlchemy store adapter.
Implements the queue primitives against PostgreSQL or SQLite.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from sqlalchemy import delete, false, func, select, text, true, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.models import QueueItem
from src.exceptions import StoreError
from src.store.base import QueueStore, utcnow
from src.types.queue import StoredItem

logger = logging.getLogger(__name__)


def _to_stored(item: QueueItem) -> StoredItem:
    """Convert a QueueItem row to a StoredItem."""
    return StoredItem(
        id=item.id,
        queue_name=item.queue_name,
        data=item.data,
        processed=item.processed,
        token=item.token,
        claimed_at=item.claimed_at,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


class SQLQueueStore(QueueStore):
    """
    Store adapter backed by a SQL database.

    Every primitive runs in its own short transaction. The claim relies on
    the database re-checking ``token IS NULL`` against the latest row
    version when two updates target the same row.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize the store with a session factory.

        Args:
            session_factory: Factory producing sessions bound to the queue database.
        """
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """Open a session and transaction, translating driver errors to StoreError."""
        try:
            async with self._session_factory() as session, session.begin():
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Store call failed: {e}")
            raise StoreError(str(e)) from e

    async def insert(self, queue_name: str, data: bytes) -> int:
        now = utcnow()
        item = QueueItem(
            queue_name=queue_name,
            data=data,
            processed=False,
            token=None,
            created_at=now,
            updated_at=now,
        )
        async with self._transaction() as session:
            session.add(item)
            await session.flush()
            return item.id

    async def mark_next(self, queue_name: str, token: str) -> None:
        now = utcnow()

        # Oldest eligible row. SKIP LOCKED is emitted on PostgreSQL only;
        # SQLite serializes writers and drops the clause.
        oldest = (
            select(QueueItem.id)
            .where(
                QueueItem.queue_name == queue_name,
                QueueItem.processed == false(),
                QueueItem.token.is_(None),
            )
            .order_by(QueueItem.id.asc())
            .limit(1)
            .with_for_update(skip_locked=True)
            .scalar_subquery()
        )

        # token IS NULL is repeated on the outer statement so a concurrent
        # winner makes this update match nothing
        stmt = (
            update(QueueItem)
            .where(
                QueueItem.id == oldest,
                QueueItem.token.is_(None),
                QueueItem.processed == false(),
            )
            .values(token=token, claimed_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )

        async with self._transaction() as session:
            result = await session.execute(stmt)

        logger.debug(
            "Conditional claim update issued",
            extra={"queue_name": queue_name, "rows": result.rowcount},
        )

    async def find_claimed(self, queue_name: str, token: str) -> StoredItem | None:
        stmt = select(QueueItem).where(
            QueueItem.queue_name == queue_name,
            QueueItem.token == token,
            QueueItem.processed == false(),
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            item = result.scalar_one_or_none()
            return _to_stored(item) if item is not None else None

    async def mark_processed(self, item_id: int, token: str) -> bool:
        stmt = (
            update(QueueItem)
            .where(
                QueueItem.id == item_id,
                QueueItem.token == token,
            )
            .values(processed=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
        return result.rowcount > 0

    async def delete_processed(self, before: datetime) -> int:
        stmt = (
            delete(QueueItem)
            .where(
                QueueItem.processed == true(),
                QueueItem.updated_at < before,
            )
            .execution_options(synchronize_session=False)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
        return result.rowcount

    async def release_claims(self, before: datetime) -> int:
        stmt = (
            update(QueueItem)
            .where(
                QueueItem.processed == false(),
                QueueItem.token.is_not(None),
                QueueItem.claimed_at < before,
            )
            .values(token=None, claimed_at=None, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
        return result.rowcount

    async def count_pending(self, queue_name: str) -> int:
        stmt = select(func.count()).select_from(QueueItem).where(
            QueueItem.queue_name == queue_name,
            QueueItem.processed == false(),
            QueueItem.token.is_(None),
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return result.scalar() or 0

    async def pending_by_queue(self) -> dict[str, int]:
        stmt = (
            select(QueueItem.queue_name, func.count())
            .where(
                QueueItem.processed == false(),
                QueueItem.token.is_(None),
            )
            .group_by(QueueItem.queue_name)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return {name: count for name, count in result.all()}

    async def ping(self) -> bool:
        try:
            async with self._transaction() as session:
                await session.execute(text("SELECT 1"))
        except StoreError:
            return False
        return True
