"""
Store adapters.
Contains the persistence interface and its SQL and in-memory backends.
"""

from src.store.base import QueueStore, utcnow
from src.store.memory import MemoryQueueStore
from src.store.sql import SQLQueueStore

__all__ = [
    "QueueStore",
    "SQLQueueStore",
    "MemoryQueueStore",
    "utcnow",
]
