"""
Heartbeat: every interval, drop registry entries whose transport is gone.

Pings and pongs are protocol control frames handled by uvicorn
(ws_ping_interval/ws_ping_timeout, both set from the heartbeat interval);
a peer that misses a pong is disconnected there. This sweep never sends
application frames; it only keeps the registry in step with the transports.
"""
import asyncio
import logging
from typing import Optional

from streamgate.core.config import settings
from streamgate.core.websocket.manager import (
    CLOSE_TRANSPORT_LOST,
    ConnectionManager,
)

logger = logging.getLogger(__name__)


async def run_heartbeat_tick(manager: ConnectionManager) -> int:
    """
    Scan every open connection once; close and unregister the dead ones.

    Returns the number of connections removed.
    """
    removed = 0
    for connection in await manager.snapshot():
        if connection.is_alive:
            continue
        logger.info("Heartbeat: transport lost, dropping %s", connection.remote_address)
        await connection.terminate(code=CLOSE_TRANSPORT_LOST, reason="transport_lost")
        await manager.unregister(connection)
        removed += 1
    logger.debug("Heartbeat: %d open, %d dropped", manager.count(), removed)
    return removed


class HeartbeatService:
    """Runs run_heartbeat_tick on a fixed interval for one connection registry."""

    def __init__(self, manager: ConnectionManager, interval: Optional[float] = None) -> None:
        self.manager = manager
        self.interval = interval if interval is not None else settings.heartbeat_interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await run_heartbeat_tick(self.manager)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception("Heartbeat tick failed: %s", e)

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Heartbeat started (tick every %ss)", self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Heartbeat stopped")
