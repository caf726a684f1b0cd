"""
Origin policy for websocket upgrades.

A policy is any callable taking the Origin header (or None when the client
sent none) and returning True to accept the upgrade.
"""
import logging
from typing import Callable, Iterable, Optional

from streamgate.core.config import settings

logger = logging.getLogger(__name__)

OriginPolicy = Callable[[Optional[str]], bool]


def allow_all_origins(origin: Optional[str]) -> bool:
    """Accept every origin. Placeholder until clients are pinned down."""
    return True


def allowlist_policy(origins: Iterable[str]) -> OriginPolicy:
    """
    Build a policy accepting only the given origins.

    Matching is exact and case-insensitive, ignoring a trailing slash.
    Requests without an Origin header (native clients) are rejected.
    """
    allowed = {o.strip().rstrip("/").lower() for o in origins if o.strip()}

    def _policy(origin: Optional[str]) -> bool:
        if not origin:
            return False
        return origin.strip().rstrip("/").lower() in allowed

    return _policy


def policy_from_settings() -> OriginPolicy:
    """Return the allow-list policy when ALLOWED_WS_ORIGINS is set, else allow all."""
    origins = settings.ws_origin_list
    if not origins:
        return allow_all_origins
    logger.info("WebSocket origins restricted to: %s", ", ".join(origins))
    return allowlist_policy(origins)
