"""
Queue-related type definitions for internal use.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class StoredItem:
    """
    Backend-neutral snapshot of a queue row.
    Returned by store adapters so the queue layer never touches ORM objects.
    """

    id: int
    queue_name: str
    data: bytes
    processed: bool
    token: str | None
    claimed_at: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class DequeuedItem:
    """
    An item handed to a consumer by a successful dequeue.

    Lets callers tell a stored ``None`` payload apart from an empty queue.
    """

    id: int
    queue_name: str
    payload: Any
    enqueued_at: datetime
