"""
API module.
Exposes enqueue, dequeue and maintenance operations over HTTP.
"""

from src.api.main import create_app, run

__all__ = ["create_app", "run"]
