"""
Row Queue

A durable multi-producer/multi-consumer FIFO queue layered over a shared SQL store.
Consumers claim items with a token-stamped conditional update, so no broker process
and no application-level locks are needed.
"""

__version__ = "1.0.0"
