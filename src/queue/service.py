"""
Queue API.

Producers call ``enqueue``; consumers call ``dequeue``, which never blocks and
returns None when nothing could be claimed. ``cleanup`` purges old processed
rows and ``reclaim`` releases claims abandoned by crashed consumers.
"""

import logging
import time
from datetime import timedelta
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import Settings, get_settings
from src.constants import (
    DEFAULT_CLEANUP_EXPIRY_SECONDS,
    QUEUE_NAME_MAX_LENGTH,
    SPAN_CLEANUP,
    SPAN_ENQUEUE,
    SPAN_RECLAIM,
    DequeueOutcome,
)
from src.observability.metrics import MetricsCollector, get_metrics
from src.observability.tracing import queue_span
from src.queue.claim import Claimer
from src.queue.codec import Codec, PickleCodec, get_codec
from src.queue.tokens import TokenGenerator
from src.store.base import QueueStore, utcnow
from src.store.sql import SQLQueueStore
from src.types.queue import DequeuedItem

logger = logging.getLogger(__name__)


def normalize_queue_name(queue_name: Any) -> str:
    """
    Reduce a queue name to its canonical string.

    Enum members stand for their value and bytes are decoded as UTF-8, so
    ``Queues.ORDERS``, ``b"orders"`` and ``"orders"`` all name one queue.
    Anything else goes through ``str()``; ``21`` is the queue ``"21"``.

    Raises:
        ValueError: If the canonical name is longer than the column allows.
    """
    if isinstance(queue_name, Enum):
        queue_name = queue_name.value
    if isinstance(queue_name, (bytes, bytearray)):
        name = bytes(queue_name).decode("utf-8")
    else:
        name = str(queue_name)

    if len(name) > QUEUE_NAME_MAX_LENGTH:
        raise ValueError(
            f"Queue name exceeds {QUEUE_NAME_MAX_LENGTH} characters: {name[:32]}..."
        )
    return name


def _as_timedelta(value: timedelta | float) -> timedelta:
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


class QueueService:
    """
    Durable FIFO queue operations over a store adapter.

    Holds no locks and opens no long transactions; exclusive delivery comes
    from the store's atomic conditional update.
    """

    def __init__(
        self,
        store: QueueStore,
        codec: Codec | None = None,
        tokens: TokenGenerator | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the queue service.

        Args:
            store: Store adapter holding the queue rows.
            codec: Payload codec. Defaults to pickle.
            tokens: Claim token source. Defaults to the process-wide generator.
            metrics: Metrics collector. Defaults to the global collector.
        """
        self.store = store
        self.codec = codec or PickleCodec()
        self._claimer = Claimer(store, tokens)
        self._metrics = metrics or get_metrics()

    async def enqueue(self, queue_name: Any, payload: Any) -> None:
        """
        Add a payload to the tail of a queue.

        Fire-and-forget: nothing is returned, success is the absence of an
        exception.

        Args:
            queue_name: Queue name (str, Enum, bytes or anything str()-able).
            payload: Any value the codec can encode.

        Raises:
            SerializationError: If the payload cannot be encoded.
            StoreError: If the insert fails.
        """
        name = normalize_queue_name(queue_name)
        data = self.codec.encode(payload)

        with queue_span(SPAN_ENQUEUE, name, payload_bytes=len(data)):
            item_id = await self.store.insert(name, data)

        self._metrics.record_enqueued(name)
        logger.info(
            "Enqueued item",
            extra={"queue_name": name, "item_id": item_id},
        )

    async def dequeue_item(self, queue_name: Any) -> DequeuedItem | None:
        """
        Claim, mark processed and return the oldest pending item of a queue.

        Args:
            queue_name: Queue name.

        Returns:
            The dequeued item, or None if the queue is empty or the claim
            race was lost.

        Raises:
            SerializationError: If the stored payload cannot be decoded.
            StoreError: If a store call fails.
        """
        name = normalize_queue_name(queue_name)
        start_time = time.perf_counter()

        claimed = await self._claimer.claim(name)
        if claimed is None:
            self._metrics.record_dequeue(
                name, DequeueOutcome.EMPTY, time.perf_counter() - start_time
            )
            return None

        item, token = claimed

        if not await self.store.mark_processed(item.id, token):
            # Released by reclaim between the claim and this update
            logger.warning(
                "Claim revoked before processing",
                extra={"queue_name": name, "item_id": item.id},
            )
            self._metrics.record_dequeue(
                name, DequeueOutcome.REVOKED, time.perf_counter() - start_time
            )
            return None

        self._metrics.record_dequeue(
            name, DequeueOutcome.CLAIMED, time.perf_counter() - start_time
        )
        logger.info(
            "Dequeued item",
            extra={"queue_name": name, "item_id": item.id},
        )

        return DequeuedItem(
            id=item.id,
            queue_name=name,
            payload=self.codec.decode(item.data),
            enqueued_at=item.created_at,
        )

    async def dequeue(self, queue_name: Any) -> Any:
        """
        Pop the oldest pending payload of a queue.

        Returns immediately. A stored ``None`` payload is indistinguishable
        from an empty queue here; use ``dequeue_item`` when that matters.

        Args:
            queue_name: Queue name.

        Returns:
            The payload, or None if nothing was available.
        """
        item = await self.dequeue_item(queue_name)
        return item.payload if item is not None else None

    async def cleanup(
        self,
        expiry: timedelta | float = timedelta(seconds=DEFAULT_CLEANUP_EXPIRY_SECONDS),
    ) -> int:
        """
        Delete processed items last updated longer ago than ``expiry``.

        Unprocessed and recently processed items are left alone. Safe to
        repeat after a partial failure.

        Args:
            expiry: Age threshold as a timedelta or seconds. Defaults to one hour.

        Returns:
            Number of rows deleted.
        """
        cutoff = utcnow() - _as_timedelta(expiry)

        with queue_span(SPAN_CLEANUP, cutoff=cutoff.isoformat()):
            deleted = await self.store.delete_processed(cutoff)

        self._metrics.record_cleanup(deleted)
        if deleted > 0:
            logger.info(f"Cleaned up {deleted} processed items")
        return deleted

    async def reclaim(self, timeout: timedelta | float) -> int:
        """
        Return stale claims to the queue.

        Items claimed longer ago than ``timeout`` but never marked processed
        (a consumer died between the two steps) become claimable again.
        A consumer that is merely slow may then see its claim revoked.

        Args:
            timeout: Claim age threshold as a timedelta or seconds.

        Returns:
            Number of claims released.
        """
        cutoff = utcnow() - _as_timedelta(timeout)

        with queue_span(SPAN_RECLAIM, cutoff=cutoff.isoformat()):
            released = await self.store.release_claims(cutoff)

        self._metrics.record_reclaimed(released)
        if released > 0:
            logger.warning(f"Released {released} stale claims")
        return released

    async def depth(self, queue_name: Any) -> int:
        """
        Count pending items of a queue.

        Args:
            queue_name: Queue name.

        Returns:
            Number of unclaimed, unprocessed items.
        """
        name = normalize_queue_name(queue_name)
        depth = await self.store.count_pending(name)
        self._metrics.update_queue_depth(name, depth)
        return depth

    async def stats(self) -> dict[str, int]:
        """Pending item counts for every non-empty queue."""
        counts = await self.store.pending_by_queue()
        for name, depth in counts.items():
            self._metrics.update_queue_depth(name, depth)
        return counts


def build_queue_service(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings | None = None,
) -> QueueService:
    """
    Create a SQL-backed queue service from settings.

    Args:
        session_factory: Session factory for the queue database.
        settings: Settings to use. Defaults to the cached settings.

    Returns:
        QueueService: The configured service.
    """
    settings = settings or get_settings()
    return QueueService(
        store=SQLQueueStore(session_factory),
        codec=get_codec(settings.queue_codec),
    )
