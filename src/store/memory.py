"""
In-memory store adapter.

Keeps rows in a dict for tests and single-process embedding. Each primitive
holds the store lock for its whole body, which gives ``mark_next`` the same
per-row atomicity a database provides.
"""

import itertools
import threading
from dataclasses import replace
from datetime import datetime

from src.store.base import QueueStore, utcnow
from src.types.queue import StoredItem


class MemoryQueueStore(QueueStore):
    """Store adapter holding queue rows in process memory."""

    def __init__(self):
        self._rows: dict[int, StoredItem] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _pending(self, queue_name: str) -> list[StoredItem]:
        return sorted(
            (
                row
                for row in self._rows.values()
                if row.queue_name == queue_name
                and not row.processed
                and row.token is None
            ),
            key=lambda row: row.id,
        )

    async def insert(self, queue_name: str, data: bytes) -> int:
        now = utcnow()
        with self._lock:
            item_id = next(self._ids)
            self._rows[item_id] = StoredItem(
                id=item_id,
                queue_name=queue_name,
                data=data,
                processed=False,
                token=None,
                claimed_at=None,
                created_at=now,
                updated_at=now,
            )
        return item_id

    async def mark_next(self, queue_name: str, token: str) -> None:
        now = utcnow()
        with self._lock:
            pending = self._pending(queue_name)
            if pending:
                row = pending[0]
                row.token = token
                row.claimed_at = now
                row.updated_at = now

    async def find_claimed(self, queue_name: str, token: str) -> StoredItem | None:
        with self._lock:
            for row in self._rows.values():
                if (
                    row.queue_name == queue_name
                    and row.token == token
                    and not row.processed
                ):
                    return replace(row)
        return None

    async def mark_processed(self, item_id: int, token: str) -> bool:
        with self._lock:
            row = self._rows.get(item_id)
            if row is None or row.token != token:
                return False
            row.processed = True
            row.updated_at = utcnow()
        return True

    async def delete_processed(self, before: datetime) -> int:
        with self._lock:
            stale = [
                row.id
                for row in self._rows.values()
                if row.processed and row.updated_at < before
            ]
            for item_id in stale:
                del self._rows[item_id]
        return len(stale)

    async def release_claims(self, before: datetime) -> int:
        now = utcnow()
        released = 0
        with self._lock:
            for row in self._rows.values():
                if (
                    not row.processed
                    and row.token is not None
                    and row.claimed_at is not None
                    and row.claimed_at < before
                ):
                    row.token = None
                    row.claimed_at = None
                    row.updated_at = now
                    released += 1
        return released

    async def count_pending(self, queue_name: str) -> int:
        with self._lock:
            return len(self._pending(queue_name))

    async def pending_by_queue(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        with self._lock:
            for row in self._rows.values():
                if not row.processed and row.token is None:
                    counts[row.queue_name] = counts.get(row.queue_name, 0) + 1
        return counts

    def rows(self) -> list[StoredItem]:
        """Snapshot of every stored row, ordered by id."""
        with self._lock:
            return [replace(row) for _, row in sorted(self._rows.items())]

    def touch(self, item_id: int, **fields) -> None:
        """Overwrite fields of a row, e.g. to age timestamps."""
        with self._lock:
            row = self._rows[item_id]
            for key, value in fields.items():
                setattr(row, key, value)
