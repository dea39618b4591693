"""
Database module.
Contains database connection management and the queue table model.
"""

from src.db.connection import (
    close_db,
    create_schema,
    create_session_factory,
    get_engine,
    get_test_engine,
    init_db,
)
from src.db.models import Base, QueueItem

__all__ = [
    "get_engine",
    "get_test_engine",
    "create_session_factory",
    "create_schema",
    "init_db",
    "close_db",
    "QueueItem",
    "Base",
]
