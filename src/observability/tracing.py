"""
OpenTelemetry tracing.

Queue operations open spans through ``queue_span`` whether or not tracing
was set up; without a provider the spans are no-ops.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Span, Tracer

from src import __version__
from src.config import Settings, get_settings

logger = logging.getLogger(__name__)

_tracer: Tracer | None = None


def setup_tracing(
    settings: Settings | None = None,
    enable_console_export: bool = False,
) -> Tracer:
    """
    Install a tracer provider exporting to the configured OTLP collector.

    Args:
        settings: Settings to read the endpoint and service name from.
        enable_console_export: Also print finished spans to stdout.

    Returns:
        Tracer: The service tracer.
    """
    global _tracer

    settings = settings or get_settings()

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.otel_service_name,
                "service.version": __version__,
            }
        )
    )
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint, insecure=True)
        )
    )
    if enable_console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(settings.otel_service_name)

    logger.info(
        "Tracing configured",
        extra={"endpoint": settings.otel_exporter_otlp_endpoint},
    )
    return _tracer


def instrument_fastapi(app: Any) -> None:
    """Trace every request handled by the FastAPI app."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine: Any) -> None:
    """
    Trace statements run on an engine.

    Async engines are instrumented through their ``sync_engine``.
    """
    SQLAlchemyInstrumentor().instrument(engine=getattr(engine, "sync_engine", engine))


def get_tracer() -> Tracer:
    """
    Get the service tracer.

    Before ``setup_tracing`` runs this is the API's proxy tracer, which
    records nothing until a provider is installed.
    """
    if _tracer is None:
        return trace.get_tracer(get_settings().otel_service_name)
    return _tracer


@contextmanager
def queue_span(name: str, queue_name: str | None = None, **attributes: Any) -> Iterator[Span]:
    """
    Open a span for a queue operation.

    Args:
        name: Span name.
        queue_name: Recorded as ``queue.name`` when given.
        **attributes: Extra attributes, recorded under the ``queue.`` prefix.
            None values are skipped.

    Yields:
        The active span.
    """
    with get_tracer().start_as_current_span(name) as span:
        if queue_name is not None:
            span.set_attribute("queue.name", queue_name)
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(f"queue.{key}", value)
        yield span
