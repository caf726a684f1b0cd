"""
WebSocket route: /audio-stream. Accept, register, ack every frame, unregister on close.
"""
import logging

from fastapi import WebSocket, WebSocketDisconnect

from streamgate.core.websocket.handler import FrameHandler
from streamgate.core.websocket.manager import Connection, ConnectionManager

logger = logging.getLogger(__name__)

CLOSE_INTERNAL_ERROR = 1011


def client_address(websocket: WebSocket) -> str:
    """Client address as seen behind a proxy (X-Forwarded-For) or on the socket."""
    forwarded = websocket.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded
    if websocket.client is not None:
        return f"{websocket.client.host}:{websocket.client.port}"
    return "unknown"


async def websocket_endpoint(websocket: WebSocket) -> None:
    """Accept the upgrade, then answer each binary or text frame until the peer goes away."""
    manager: ConnectionManager = websocket.app.state.connections
    handler: FrameHandler = websocket.app.state.frame_handler

    await websocket.accept()
    connection = Connection(websocket, remote_address=client_address(websocket), path=websocket.url.path)
    await manager.register(connection)
    logger.info("WS connected: %s %s", connection.remote_address, connection.path)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                connection.closed = True
                logger.info("WS closed %s %s", message.get("code"), message.get("reason") or "")
                break
            await handler.handle(connection, message)
    except WebSocketDisconnect as e:
        connection.closed = True
        logger.info("WS closed %s %s", e.code, e.reason or "")
    except Exception as e:
        logger.error("WS error from %s: %s", connection.remote_address, e)
        await connection.terminate(code=CLOSE_INTERNAL_ERROR, reason="internal_error")
    finally:
        await manager.unregister(connection)
