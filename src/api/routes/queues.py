"""
Queue routes.
"""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Response, status

from src.api.dependencies import QueueServiceDep
from src.config import get_settings
from src.constants import API_V1_PREFIX, QUEUE_NAME_MAX_LENGTH
from src.types.api import (
    CleanupRequest,
    CleanupResponse,
    DequeueResponse,
    EnqueueRequest,
    EnqueueResponse,
    QueueDepthResponse,
    ReclaimRequest,
    ReclaimResponse,
)

router = APIRouter(prefix=f"{API_V1_PREFIX}/queues", tags=["Queues"])

QueueName = Annotated[str, Path(min_length=1, max_length=QUEUE_NAME_MAX_LENGTH)]


@router.get(
    "",
    summary="Queue statistics",
    description="Pending item counts for every non-empty queue.",
)
async def get_queue_stats(service: QueueServiceDep) -> dict[str, int]:
    """
    Get pending counts keyed by queue name.

    Args:
        service: Queue service.

    Returns:
        Dictionary of queue name -> pending items.
    """
    return await service.stats()


@router.post(
    "/cleanup",
    response_model=CleanupResponse,
    summary="Purge processed items",
    description="Delete processed items older than the expiry.",
)
async def cleanup(
    service: QueueServiceDep,
    request: CleanupRequest = CleanupRequest(),
) -> CleanupResponse:
    """
    Delete processed items older than the requested or configured expiry.

    Args:
        service: Queue service.
        request: Cleanup options.

    Returns:
        CleanupResponse with the number of deleted rows.
    """
    expiry = request.expiry_seconds
    if expiry is None:
        expiry = get_settings().queue_cleanup_expiry_seconds

    deleted = await service.cleanup(timedelta(seconds=expiry))
    return CleanupResponse(deleted=deleted)


@router.post(
    "/reclaim",
    response_model=ReclaimResponse,
    summary="Release stale claims",
    description="Make items claimed but never processed claimable again.",
)
async def reclaim(
    service: QueueServiceDep,
    request: ReclaimRequest = ReclaimRequest(),
) -> ReclaimResponse:
    """
    Release claims older than the requested or configured timeout.

    Args:
        service: Queue service.
        request: Reclaim options.

    Returns:
        ReclaimResponse with the number of released claims.

    Raises:
        HTTPException: If no timeout was given and none is configured.
    """
    timeout = request.timeout_seconds
    if timeout is None:
        timeout = get_settings().queue_claim_timeout_seconds
    if timeout is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No claim timeout configured",
        )

    reclaimed = await service.reclaim(timedelta(seconds=timeout))
    return ReclaimResponse(reclaimed=reclaimed)


@router.get(
    "/{queue_name}",
    response_model=QueueDepthResponse,
    summary="Queue depth",
    description="Number of items waiting to be claimed.",
)
async def get_queue_depth(
    queue_name: QueueName,
    service: QueueServiceDep,
) -> QueueDepthResponse:
    """
    Get the pending depth of a queue.

    Args:
        queue_name: The queue name.
        service: Queue service.

    Returns:
        QueueDepthResponse for the queue.
    """
    depth = await service.depth(queue_name)
    return QueueDepthResponse(queue_name=queue_name, depth=depth)


@router.post(
    "/{queue_name}/items",
    response_model=EnqueueResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Enqueue an item",
    description="Append a JSON payload to the tail of a queue.",
)
async def enqueue(
    queue_name: QueueName,
    request: EnqueueRequest,
    service: QueueServiceDep,
) -> EnqueueResponse:
    """
    Enqueue a payload.

    Args:
        queue_name: The queue name.
        request: Enqueue request carrying the payload.
        service: Queue service.

    Returns:
        EnqueueResponse acknowledging the insert.
    """
    await service.enqueue(queue_name, request.payload)
    return EnqueueResponse(queue_name=queue_name)


@router.post(
    "/{queue_name}/dequeue",
    response_model=DequeueResponse,
    summary="Dequeue an item",
    description="Claim the oldest pending item. Returns 204 when none is available.",
    responses={204: {"description": "Queue empty"}},
)
async def dequeue(
    queue_name: QueueName,
    service: QueueServiceDep,
) -> DequeueResponse | Response:
    """
    Dequeue the oldest pending item without waiting.

    Args:
        queue_name: The queue name.
        service: Queue service.

    Returns:
        DequeueResponse with the payload, or an empty 204 response.
    """
    item = await service.dequeue_item(queue_name)
    if item is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return DequeueResponse(
        id=item.id,
        queue_name=item.queue_name,
        payload=item.payload,
        enqueued_at=item.enqueued_at,
    )
