"""
WebSocket frame handling: every inbound frame is answered with an ack carrying its byte length.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from streamgate.core.websocket.manager import Connection

logger = logging.getLogger(__name__)

# Downstream hook: receives each payload after it is acknowledged.
FrameForwarder = Callable[[Connection, bytes], Awaitable[None]]


def frame_payload(message: Mapping[str, Any]) -> bytes:
    """
    Extract the payload of an ASGI websocket.receive event as bytes.

    Binary frames arrive under "bytes", text frames under "text" (encoded as UTF-8).
    """
    data = message.get("bytes")
    if data is not None:
        return bytes(data)
    text = message.get("text")
    if text is not None:
        return text.encode("utf-8")
    return b""


def build_ack(size: int) -> Dict[str, Any]:
    return {"type": "ack", "bytes": size}


class FrameHandler:
    """
    Acknowledges frames and hands payloads to an optional forwarder.

    No forwarder is installed by default. Audio frames are not decoded; the
    forwarder receives the raw payload exactly as it arrived.
    """

    def __init__(self, forwarder: Optional[FrameForwarder] = None) -> None:
        self.forwarder = forwarder

    async def handle(self, connection: Connection, message: Mapping[str, Any]) -> Dict[str, Any]:
        payload = frame_payload(message)
        ack = build_ack(len(payload))
        await connection.send_json(ack)
        if self.forwarder is not None:
            try:
                await self.forwarder(connection, payload)
            except Exception as e:
                logger.error("Forwarding frame from %s failed: %s", connection.remote_address, e, exc_info=True)
        return ack
