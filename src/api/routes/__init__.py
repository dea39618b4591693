"""
API routes module.
"""

from src.api.routes.health import router as health_router
from src.api.routes.queues import router as queues_router

__all__ = ["queues_router", "health_router"]
