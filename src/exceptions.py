"""
Queue exception hierarchy.

An empty dequeue is a normal outcome and never raises; these exceptions
cover codec and store failures only.
"""


class QueueError(Exception):
    """Base class for all queue errors."""


class SerializationError(QueueError):
    """A payload could not be encoded or decoded by the configured codec."""


class StoreError(QueueError):
    """An underlying store call failed (connectivity, constraint violation, ...)."""
