"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class DequeueOutcome(StrEnum):
    """
    Result of a single dequeue attempt.

    - CLAIMED: the caller won the claim and the item is now processed
    - EMPTY: no eligible item, or a concurrent caller won the race
    - REVOKED: the claim was reclaimed before it could be marked processed
    """

    CLAIMED = "claimed"
    EMPTY = "empty"
    REVOKED = "revoked"


class CodecName(StrEnum):
    """Available payload codecs."""

    PICKLE = "pickle"
    JSON = "json"


# Default values
DEFAULT_CLEANUP_EXPIRY_SECONDS = 3600
QUEUE_NAME_MAX_LENGTH = 255
TOKEN_LENGTH = 40

# API constants
API_V1_PREFIX = "/v1"

# Metrics names
METRIC_QUEUE_DEPTH = "rowqueue_queue_depth"
METRIC_ITEMS_ENQUEUED = "rowqueue_items_enqueued_total"
METRIC_DEQUEUE_ATTEMPTS = "rowqueue_dequeue_attempts_total"
METRIC_DEQUEUE_DURATION = "rowqueue_dequeue_duration_seconds"
METRIC_ITEMS_CLEANED = "rowqueue_items_cleaned_total"
METRIC_CLAIMS_RECLAIMED = "rowqueue_claims_reclaimed_total"
METRIC_API_REQUESTS = "rowqueue_api_requests_total"

# Trace span names
SPAN_ENQUEUE = "enqueue"
SPAN_CLAIM = "claim"
SPAN_CLEANUP = "cleanup"
SPAN_RECLAIM = "reclaim"
