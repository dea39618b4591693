"""
Queue janitor.

Runs ``cleanup`` on a fixed interval so processed rows do not accumulate,
and, when a claim timeout is configured, ``reclaim`` so items claimed by a
consumer that died before marking them processed are delivered again.
"""

import asyncio
import logging
import signal
from datetime import timedelta

from src.config import Settings, get_settings
from src.db import close_db, init_db
from src.observability.logging import setup_logging
from src.queue.service import QueueService, build_queue_service

logger = logging.getLogger(__name__)


class Janitor:
    """
    Background maintenance loop for the queue table.

    Each pass:
    1. Releases claims older than the claim timeout (if configured)
    2. Deletes processed items older than the cleanup expiry
    3. Refreshes the queue depth gauges
    """

    def __init__(
        self,
        service: QueueService,
        interval_seconds: float | None = None,
        expiry_seconds: int | None = None,
        claim_timeout_seconds: int | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize the janitor.

        Args:
            service: Queue service to maintain.
            interval_seconds: Seconds between passes.
            expiry_seconds: Age after which processed items are deleted.
            claim_timeout_seconds: Age after which unprocessed claims are
                released. None leaves claims alone.
            settings: Fallback for unset arguments.
        """
        settings = settings or get_settings()
        self.service = service
        self.interval = (
            interval_seconds
            if interval_seconds is not None
            else settings.janitor_interval_seconds
        )
        self.expiry = timedelta(
            seconds=expiry_seconds
            if expiry_seconds is not None
            else settings.queue_cleanup_expiry_seconds
        )
        timeout = (
            claim_timeout_seconds
            if claim_timeout_seconds is not None
            else settings.queue_claim_timeout_seconds
        )
        self.claim_timeout = timedelta(seconds=timeout) if timeout is not None else None
        self._running = False

    async def start(self) -> None:
        """Start the janitor loop."""
        logger.info(
            f"Janitor starting with interval {self.interval}s",
            extra={
                "expiry_seconds": self.expiry.total_seconds(),
                "reclaim_enabled": self.claim_timeout is not None,
            },
        )
        self._running = True

        while self._running:
            try:
                await self.run_once()
            except Exception as e:
                logger.exception(f"Error in janitor loop: {e}")

            await asyncio.sleep(self.interval)

        logger.info("Janitor stopped")

    async def stop(self) -> None:
        """Stop the janitor."""
        logger.info("Janitor stopping")
        self._running = False

    async def run_once(self) -> tuple[int, int]:
        """
        Run a single maintenance pass.

        Returns:
            Tuple of (items deleted, claims released).
        """
        released = 0
        if self.claim_timeout is not None:
            released = await self.service.reclaim(self.claim_timeout)

        deleted = await self.service.cleanup(self.expiry)
        await self.service.stats()

        return deleted, released


async def run_async() -> None:
    """Run the janitor asynchronously."""
    setup_logging()
    session_factory = await init_db()

    janitor = Janitor(build_queue_service(session_factory))

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: asyncio.create_task(janitor.stop())
        )

    try:
        await janitor.start()
    finally:
        await close_db()


def run() -> None:
    """Run the janitor."""
    asyncio.run(run_async())


if __name__ == "__main__":
    run()
