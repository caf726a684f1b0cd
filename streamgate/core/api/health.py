"""
Health check endpoints.

The root answers uptime monitors with plain text; /api/health is for programmatic checks.
"""
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from streamgate.core.websocket.manager import now_ms

router = APIRouter(tags=["health"])


@router.api_route("/", methods=["GET", "HEAD"], response_class=PlainTextResponse)
def root() -> str:
    return "OK"


@router.get("/api/health")
def health():
    """
    Health check endpoint.

    Returns:
        ok flag and server time in epoch milliseconds
    """
    return {"ok": True, "ts": now_ms()}
