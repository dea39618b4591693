"""
Type definitions for the queue.
Contains input/output type definitions for all functions, grouped by module.
"""

from src.types.api import (
    CleanupRequest,
    CleanupResponse,
    DequeueResponse,
    EnqueueRequest,
    EnqueueResponse,
    ErrorResponse,
    HealthResponse,
    QueueDepthResponse,
    ReclaimRequest,
    ReclaimResponse,
)
from src.types.queue import (
    DequeuedItem,
    StoredItem,
)

__all__ = [
    # API types
    "EnqueueRequest",
    "EnqueueResponse",
    "DequeueResponse",
    "QueueDepthResponse",
    "CleanupRequest",
    "CleanupResponse",
    "ReclaimRequest",
    "ReclaimResponse",
    "HealthResponse",
    "ErrorResponse",
    # Queue types
    "StoredItem",
    "DequeuedItem",
]
