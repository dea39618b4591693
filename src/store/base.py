"""
Store adapter interface.

A store adapter is the only shared mutable resource of the queue. Backends
implement a handful of primitives; the atomic claim is composed from two of
them in ``QueueStore.claim_next``.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime

from src.types.queue import StoredItem


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class QueueStore(ABC):
    """
    Persistence client for queue items.

    The correctness of the whole queue rests on ``mark_next`` being atomic per
    matched row: when two callers race for the same row, only one of them may
    set its token.
    """

    @abstractmethod
    async def insert(self, queue_name: str, data: bytes) -> int:
        """
        Create an unclaimed, unprocessed row.

        Args:
            queue_name: Canonical queue name.
            data: Encoded payload.

        Returns:
            The new row id.
        """

    @abstractmethod
    async def mark_next(self, queue_name: str, token: str) -> None:
        """
        Set ``token`` on the oldest unclaimed, unprocessed row of a queue.

        Conditional update limited to one row, ordered by id ascending.
        Updates nothing when the queue is empty or the race is lost.
        """

    @abstractmethod
    async def find_claimed(self, queue_name: str, token: str) -> StoredItem | None:
        """Look up the unprocessed row of a queue carrying ``token``."""

    @abstractmethod
    async def mark_processed(self, item_id: int, token: str) -> bool:
        """
        Flag a claimed row as processed.

        Returns:
            False if the row no longer carries ``token``.
        """

    @abstractmethod
    async def delete_processed(self, before: datetime) -> int:
        """Delete processed rows last updated before ``before``. Returns the count."""

    @abstractmethod
    async def release_claims(self, before: datetime) -> int:
        """Clear tokens of unprocessed rows claimed before ``before``. Returns the count."""

    @abstractmethod
    async def count_pending(self, queue_name: str) -> int:
        """Number of unclaimed, unprocessed rows in a queue."""

    @abstractmethod
    async def pending_by_queue(self) -> dict[str, int]:
        """Unclaimed, unprocessed row counts keyed by queue name."""

    async def ping(self) -> bool:
        """Check that the store is reachable."""
        return True

    async def claim_next(self, queue_name: str, token: str) -> StoredItem | None:
        """
        Atomically claim the oldest available item of a queue.

        Issues the conditional update, then reads back the row stamped with
        ``token``. The two calls are deliberately not wrapped in one
        transaction; only the update itself has to be atomic.

        Args:
            queue_name: Canonical queue name.
            token: Fresh, unique claim token.

        Returns:
            The claimed item, or None if nothing was claimed.
        """
        await self.mark_next(queue_name, token)
        return await self.find_claimed(queue_name, token)
