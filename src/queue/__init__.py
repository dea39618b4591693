"""
Queue module.
Contains the queue API, the claim algorithm, codecs and token generation.
"""

from src.queue.claim import Claimer
from src.queue.codec import Codec, JSONCodec, PickleCodec, get_codec
from src.queue.service import QueueService, build_queue_service, normalize_queue_name
from src.queue.tokens import TokenGenerator, get_token_generator

__all__ = [
    "QueueService",
    "build_queue_service",
    "normalize_queue_name",
    "Claimer",
    "Codec",
    "PickleCodec",
    "JSONCodec",
    "get_codec",
    "TokenGenerator",
    "get_token_generator",
]
