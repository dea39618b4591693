"""
Claim algorithm.

Gives a caller exclusive ownership of the oldest unclaimed, unprocessed item
of a queue, or nothing. There is no blocking and no internal retry: losing a
race looks exactly like an empty queue, and trying again is up to the caller.
"""

import logging

from src.constants import SPAN_CLAIM
from src.observability.tracing import queue_span
from src.queue.tokens import TokenGenerator, get_token_generator
from src.store.base import QueueStore
from src.types.queue import StoredItem

logger = logging.getLogger(__name__)


class Claimer:
    """
    Runs claim attempts against a store.

    Each attempt:
    1. Generates a fresh token
    2. Stamps it on the oldest eligible row (conditional update, limit 1)
    3. Reads back the row carrying the token
    """

    def __init__(self, store: QueueStore, tokens: TokenGenerator | None = None):
        """
        Initialize the claimer.

        Args:
            store: Store adapter holding the queue rows.
            tokens: Token source. Defaults to the process-wide generator.
        """
        self._store = store
        self._tokens = tokens or get_token_generator()

    async def claim(self, queue_name: str) -> tuple[StoredItem, str] | None:
        """
        Attempt to claim the next item of a queue.

        Args:
            queue_name: Canonical queue name.

        Returns:
            The claimed item and the token that owns it, or None.
        """
        token = self._tokens.generate()

        with queue_span(SPAN_CLAIM, queue_name) as span:
            item = await self._store.claim_next(queue_name, token)
            span.set_attribute("queue.claimed", item is not None)

        if item is None:
            logger.debug("Nothing claimed", extra={"queue_name": queue_name})
            return None

        logger.debug(
            "Claimed item",
            extra={"queue_name": queue_name, "item_id": item.id},
        )
        return item, token
