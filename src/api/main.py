"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src import __version__
from src.api.routes import health_router, queues_router
from src.config import get_settings
from src.db import close_db, get_engine, init_db
from src.exceptions import SerializationError, StoreError
from src.observability.logging import setup_logging
from src.observability.metrics import get_metrics, setup_metrics
from src.observability.tracing import instrument_fastapi, instrument_sqlalchemy, setup_tracing
from src.queue.service import QueueService, build_queue_service
from src.types.api import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Connects to the database and builds the queue service unless one was
    injected through ``create_app``.
    """
    owns_database = app.state.queue_service is None

    if owns_database:
        setup_logging()
        setup_metrics()
        setup_tracing()
        session_factory = await init_db()
        instrument_sqlalchemy(get_engine())
        app.state.queue_service = build_queue_service(session_factory)

    logger.info("Application started")

    yield

    if owns_database:
        await close_db()
        app.state.queue_service = None
    logger.info("Application shutdown")


async def record_request_metrics(request: Request, call_next):
    """Count requests by route template and status."""
    response = await call_next(request)
    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    get_metrics().record_api_request(request.method, endpoint, response.status_code)
    return response


async def handle_serialization_error(request: Request, exc: SerializationError) -> JSONResponse:
    """Map codec failures to 422."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="serialization_error", detail=str(exc)).model_dump(),
    )


async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
    """Map store failures to 503."""
    logger.error(f"Store unavailable: {exc}", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ErrorResponse(error="store_error", detail="Queue store unavailable").model_dump(),
    )


def create_app(queue_service: QueueService | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        queue_service: Pre-built queue service. When omitted the lifespan
            handler builds a SQL-backed one from settings.

    Returns:
        FastAPI: The configured application instance.
    """
    app = FastAPI(
        title="Row Queue API",
        description="Durable FIFO queues over a shared SQL store",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.queue_service = queue_service

    app.add_middleware(BaseHTTPMiddleware, dispatch=record_request_metrics)

    app.add_exception_handler(SerializationError, handle_serialization_error)
    app.add_exception_handler(StoreError, handle_store_error)

    app.include_router(health_router)
    app.include_router(queues_router)

    instrument_fastapi(app)

    return app


def run() -> None:
    """Run the API server."""
    settings = get_settings()

    uvicorn.run(
        create_app(),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
