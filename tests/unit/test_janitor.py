"""
Unit tests for the queue janitor.
"""

import asyncio
from datetime import timedelta

import pytest

from src.exceptions import StoreError
from src.janitor.main import Janitor
from src.queue.claim import Claimer
from src.queue.service import QueueService
from src.store import QueueStore, utcnow


class TestJanitor:
    """Tests for Janitor."""

    async def test_run_once_cleans_and_reclaims(
        self,
        queue: QueueService,
        store: QueueStore,
        age_item,
    ):
        """Test one pass deletes stale processed rows and frees stale claims."""
        old = utcnow() - timedelta(hours=2)

        await queue.enqueue("orders", "done")
        done = await queue.dequeue_item("orders")
        await age_item(done.id, updated_at=old)

        await queue.enqueue("orders", "abandoned")
        abandoned, _ = await Claimer(store).claim("orders")
        await age_item(abandoned.id, claimed_at=old)

        janitor = Janitor(
            queue,
            interval_seconds=1,
            expiry_seconds=3600,
            claim_timeout_seconds=300,
        )

        assert await janitor.run_once() == (1, 1)
        assert await queue.dequeue("orders") == "abandoned"

    async def test_reclaim_disabled_by_default(
        self,
        queue: QueueService,
        store: QueueStore,
        age_item,
    ):
        """Test claims are left alone when no timeout is configured."""
        await queue.enqueue("orders", "abandoned")
        abandoned, _ = await Claimer(store).claim("orders")
        await age_item(abandoned.id, claimed_at=utcnow() - timedelta(days=1))

        janitor = Janitor(queue, interval_seconds=1)

        assert janitor.claim_timeout is None
        assert await janitor.run_once() == (0, 0)
        assert await queue.dequeue("orders") is None

    def test_zero_values_are_honoured(self, queue: QueueService):
        """Test zero interval and zero claim timeout are not replaced by settings."""
        janitor = Janitor(queue, interval_seconds=0, claim_timeout_seconds=0)

        assert janitor.interval == 0
        assert janitor.claim_timeout == timedelta(0)

    async def test_loop_survives_errors(
        self,
        queue: QueueService,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """Test a failing pass is logged and the loop keeps running."""
        calls = 0

        async def flaky_cleanup(expiry):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise StoreError("connection lost")
            await janitor.stop()
            return 0

        monkeypatch.setattr(queue, "cleanup", flaky_cleanup)
        janitor = Janitor(queue, interval_seconds=0.01)

        await asyncio.wait_for(janitor.start(), timeout=5)

        assert calls == 2
