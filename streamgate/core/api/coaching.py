"""
Coaching endpoints used by the recording client.
"""
import logging

from fastapi import APIRouter, Response, status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/coaching", tags=["coaching"])


@router.post("/clear-buffer", status_code=status.HTTP_204_NO_CONTENT)
async def clear_buffer() -> Response:
    """
    Acknowledge a buffer reset.

    The body is never read, so any payload (or none) is accepted. No audio is
    buffered server-side yet; once per-session state exists, clear it here.
    """
    logger.debug("clear-buffer requested (no server-side buffer)")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
