"""
Prometheus metrics collection.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from src.constants import (
    METRIC_API_REQUESTS,
    METRIC_CLAIMS_RECLAIMED,
    METRIC_DEQUEUE_ATTEMPTS,
    METRIC_DEQUEUE_DURATION,
    METRIC_ITEMS_CLEANED,
    METRIC_ITEMS_ENQUEUED,
    METRIC_QUEUE_DEPTH,
)

# Global metrics instance
_metrics: "MetricsCollector | None" = None


class MetricsCollector:
    """
    Prometheus metrics collector for the queue.

    Collects metrics for:
    - Queue depth
    - Enqueues and dequeue outcomes
    - Dequeue latency
    - Cleanup and reclaim activity
    - API requests
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the metrics collector.

        Args:
            registry: Optional custom registry. Uses default if not provided.
        """
        self._registry = registry or REGISTRY

        # Queue depth gauge (by queue)
        self.queue_depth = Gauge(
            METRIC_QUEUE_DEPTH,
            "Number of unclaimed items in the queue",
            ["queue_name"],
            registry=self._registry,
        )

        self.items_enqueued = Counter(
            METRIC_ITEMS_ENQUEUED,
            "Total number of items enqueued",
            ["queue_name"],
            registry=self._registry,
        )

        # Outcome is one of claimed, empty, revoked
        self.dequeue_attempts = Counter(
            METRIC_DEQUEUE_ATTEMPTS,
            "Total number of dequeue attempts",
            ["queue_name", "outcome"],
            registry=self._registry,
        )

        self.dequeue_duration = Histogram(
            METRIC_DEQUEUE_DURATION,
            "Dequeue latency in seconds",
            ["queue_name"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
            registry=self._registry,
        )

        self.items_cleaned = Counter(
            METRIC_ITEMS_CLEANED,
            "Total number of processed items deleted by cleanup",
            registry=self._registry,
        )

        self.claims_reclaimed = Counter(
            METRIC_CLAIMS_RECLAIMED,
            "Total number of stale claims released",
            registry=self._registry,
        )

        # API requests counter
        self.api_requests = Counter(
            METRIC_API_REQUESTS,
            "Total number of API requests",
            ["method", "endpoint", "status"],
            registry=self._registry,
        )

    def record_enqueued(self, queue_name: str) -> None:
        """Record an enqueue."""
        self.items_enqueued.labels(queue_name=queue_name).inc()

    def record_dequeue(
        self,
        queue_name: str,
        outcome: str,
        duration_seconds: float,
    ) -> None:
        """Record a dequeue attempt and its latency."""
        self.dequeue_attempts.labels(queue_name=queue_name, outcome=outcome).inc()
        self.dequeue_duration.labels(queue_name=queue_name).observe(duration_seconds)

    def record_cleanup(self, count: int) -> None:
        """Record rows deleted by cleanup."""
        self.items_cleaned.inc(count)

    def record_reclaimed(self, count: int) -> None:
        """Record released claims."""
        self.claims_reclaimed.inc(count)

    def update_queue_depth(self, queue_name: str, depth: int) -> None:
        """Update pending depth for a queue."""
        self.queue_depth.labels(queue_name=queue_name).set(depth)

    def record_api_request(self, method: str, endpoint: str, status: int) -> None:
        """Record an API request."""
        self.api_requests.labels(
            method=method,
            endpoint=endpoint,
            status=str(status),
        ).inc()

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self._registry)

    def get_content_type(self) -> str:
        """Get the content type for metrics response."""
        return CONTENT_TYPE_LATEST


def setup_metrics() -> MetricsCollector:
    """
    Set up and return the metrics collector.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_metrics() -> MetricsCollector:
    """
    Get the metrics collector instance, creating it on first use.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    if _metrics is None:
        return setup_metrics()
    return _metrics
