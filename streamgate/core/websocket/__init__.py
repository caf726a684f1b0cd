"""
WebSocket layer for the audio stream: upgrade gateway, connection registry, frame acks.

One registry per application. Protocol ping every 25s (uvicorn); peers that miss a pong are dropped.
"""

from streamgate.core.websocket.gateway import AUDIO_STREAM_PATH, UpgradeGateway, normalize_path
from streamgate.core.websocket.handler import FrameHandler, build_ack
from streamgate.core.websocket.manager import Connection, ConnectionManager

__all__ = [
    "AUDIO_STREAM_PATH",
    "UpgradeGateway",
    "normalize_path",
    "FrameHandler",
    "build_ack",
    "Connection",
    "ConnectionManager",
]
