"""
Upgrade gateway: ASGI middleware that vets every websocket upgrade before routing.

Only the audio stream path is upgraded (trailing slashes tolerated). Anything
else, or an origin the policy rejects, is closed before the handshake completes.

ASGI has no way to drop the raw socket from inside the application: closing a
websocket scope before accept makes uvicorn answer with HTTP 403 and then close
the connection. No 101 is ever sent, so no websocket session exists, but the
client does see that 403 rather than a bare disconnect.
"""
import logging
import re
from typing import Optional

from starlette.types import ASGIApp, Receive, Scope, Send

from streamgate.core.security.origin import OriginPolicy, allow_all_origins

logger = logging.getLogger(__name__)

AUDIO_STREAM_PATH = "/audio-stream"

_TRAILING_SLASHES = re.compile(r"/+$")


def normalize_path(path: str) -> str:
    """Strip trailing slashes; the bare root stays "/"."""
    return _TRAILING_SLASHES.sub("", path or "") or "/"


def header_value(scope: Scope, name: bytes) -> Optional[str]:
    """First value of a request header from an ASGI scope, decoded as latin-1."""
    for key, value in scope.get("headers") or []:
        if key.lower() == name:
            return value.decode("latin-1")
    return None


class UpgradeGateway:
    """Accept websocket upgrades on one path only, subject to an origin policy."""

    def __init__(
        self,
        app: ASGIApp,
        path: str = AUDIO_STREAM_PATH,
        origin_policy: Optional[OriginPolicy] = None,
    ) -> None:
        self.app = app
        self.path = normalize_path(path)
        self.origin_policy = origin_policy or allow_all_origins

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "websocket":
            await self.app(scope, receive, send)
            return

        requested = scope.get("path", "/")
        pathname = normalize_path(requested)
        if pathname != self.path:
            logger.debug("Rejecting websocket upgrade for %s", requested)
            await self._reject(send)
            return

        origin = header_value(scope, b"origin")
        if not self.origin_policy(origin):
            logger.warning("Rejecting websocket upgrade from origin %s", origin)
            await self._reject(send)
            return

        if pathname != requested:
            scope = dict(scope)
            scope["path"] = pathname
            scope["raw_path"] = pathname.encode("latin-1")
        await self.app(scope, receive, send)

    @staticmethod
    async def _reject(send: Send) -> None:
        # Closing before accept: uvicorn replies 403 and closes, never 101.
        await send({"type": "websocket.close", "code": 1008})
