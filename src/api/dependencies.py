"""
FastAPI dependencies.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.queue.service import QueueService


def get_queue_service(request: Request) -> QueueService:
    """
    Get the queue service attached to the running application.

    Raises:
        HTTPException: If the application has not finished starting up.
    """
    service = getattr(request.app.state, "queue_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Queue service not initialized",
        )
    return service


QueueServiceDep = Annotated[QueueService, Depends(get_queue_service)]
