"""
API request and response type definitions.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class EnqueueRequest(BaseModel):
    """Request body for adding an item to a queue."""

    payload: Any = Field(..., description="Any JSON value to enqueue")


class EnqueueResponse(BaseModel):
    """Response body after enqueueing."""

    queue_name: str
    message: str = "Item enqueued"


class DequeueResponse(BaseModel):
    """Response body for a successful dequeue."""

    id: int
    queue_name: str
    payload: Any
    enqueued_at: datetime


class QueueDepthResponse(BaseModel):
    """Pending item count for a queue."""

    queue_name: str
    depth: int


class CleanupRequest(BaseModel):
    """Request body for purging processed items."""

    expiry_seconds: int | None = Field(
        default=None, ge=0, description="Age after which processed items are deleted"
    )


class CleanupResponse(BaseModel):
    """Response body after cleanup."""

    deleted: int


class ReclaimRequest(BaseModel):
    """Request body for releasing stale claims."""

    timeout_seconds: int | None = Field(
        default=None, ge=0, description="Age after which unprocessed claims are released"
    )


class ReclaimResponse(BaseModel):
    """Response body after reclaim."""

    reclaimed: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    database: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    detail: str | None = None
