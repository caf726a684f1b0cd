"""
Connection registry: one Connection per accepted websocket, dead-transport sweep, close-all on shutdown.
"""
import asyncio
import logging
import time
from typing import Any, Dict, List

from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)

# Close codes
CLOSE_GOING_AWAY = 1001
CLOSE_TRANSPORT_LOST = 4001


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


class Connection:
    """
    One accepted websocket session.

    Ping/pong runs at the protocol level inside the ASGI server (uvicorn's
    ws_ping_interval/ws_ping_timeout); a peer that misses a pong has its
    transport closed there. is_alive therefore reports whether the transport
    is still open on both sides.
    """

    def __init__(self, websocket: Any, remote_address: str = "", path: str = "") -> None:
        self.websocket = websocket
        self.remote_address = remote_address
        self.path = path
        self.closed = False
        self._send_lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"<Connection {self.remote_address} {self.path} alive={self.is_alive}>"

    @property
    def is_alive(self) -> bool:
        if self.closed:
            return False
        client_state = getattr(self.websocket, "client_state", WebSocketState.CONNECTED)
        application_state = getattr(self.websocket, "application_state", WebSocketState.CONNECTED)
        return client_state == WebSocketState.CONNECTED and application_state == WebSocketState.CONNECTED

    async def send_json(self, obj: Dict[str, Any]) -> None:
        """Send one JSON text frame; serialized so a close never lands mid-send."""
        async with self._send_lock:
            await self.websocket.send_json(obj)

    async def terminate(self, code: int = CLOSE_TRANSPORT_LOST, reason: str = "") -> None:
        """Close the socket once. Errors from an already-dead transport are logged and dropped."""
        if self.closed:
            return
        self.closed = True
        try:
            await self.websocket.close(code=code, reason=reason)
        except Exception as e:
            logger.debug("Close %s failed: %s", self.remote_address, e)


class ConnectionManager:
    """Registry of open connections; safe to snapshot while connections come and go."""

    def __init__(self) -> None:
        self._connections: List[Connection] = []
        self._lock = asyncio.Lock()

    async def register(self, connection: Connection) -> None:
        async with self._lock:
            if connection not in self._connections:
                self._connections.append(connection)
        logger.debug("Registered %r (%d open)", connection, len(self._connections))

    async def unregister(self, connection: Connection) -> None:
        """Remove connection if still registered."""
        async with self._lock:
            if connection in self._connections:
                self._connections.remove(connection)
        logger.debug("Unregistered %r (%d open)", connection, len(self._connections))

    async def snapshot(self) -> List[Connection]:
        """Return a copy of the open connections for iteration outside the lock."""
        async with self._lock:
            return list(self._connections)

    def count(self) -> int:
        return len(self._connections)

    async def close_all(self, code: int = CLOSE_GOING_AWAY, reason: str = "server_shutdown") -> None:
        """Close every open connection and empty the registry."""
        async with self._lock:
            connections = list(self._connections)
            self._connections.clear()
        for connection in connections:
            await connection.terminate(code=code, reason=reason)
        if connections:
            logger.info("Closed %d websocket connection(s): %s", len(connections), reason)
