"""
Observability: structured logging, Prometheus metrics and OpenTelemetry spans
for queue operations.
"""

from src.observability.logging import setup_logging
from src.observability.metrics import MetricsCollector, get_metrics, setup_metrics
from src.observability.tracing import get_tracer, queue_span, setup_tracing

__all__ = [
    "setup_logging",
    "MetricsCollector",
    "setup_metrics",
    "get_metrics",
    "setup_tracing",
    "get_tracer",
    "queue_span",
]
