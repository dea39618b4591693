"""
Health check routes.
"""

from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.responses import Response

from src import __version__
from src.api.dependencies import QueueServiceDep
from src.observability.metrics import get_metrics
from src.types.api import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health of the API and its store.",
)
async def health_check(service: QueueServiceDep) -> HealthResponse:
    """
    Perform a health check.

    Args:
        service: Queue service whose store is pinged.

    Returns:
        HealthResponse with service status.
    """
    db_status = "healthy" if await service.store.ping() else "unhealthy"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        version=__version__,
        database=db_status,
        timestamp=datetime.now(UTC),
    )


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if the service is ready to receive traffic.",
)
async def readiness_check(service: QueueServiceDep) -> dict:
    """
    Kubernetes readiness probe endpoint.

    Args:
        service: Queue service whose store is pinged.

    Returns:
        Ready status.
    """
    return {"ready": await service.store.ping()}


@router.get(
    "/live",
    summary="Liveness check",
    description="Check if the service is alive.",
)
async def liveness_check() -> dict:
    """Kubernetes liveness probe endpoint."""
    return {"alive": True}


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Expose Prometheus metrics.",
)
async def metrics() -> Response:
    """Expose Prometheus metrics."""
    metrics_collector = get_metrics()
    return Response(
        content=metrics_collector.get_metrics(),
        media_type=metrics_collector.get_content_type(),
    )
