"""
Configuration management for the streamgate server.

Handles environment-based configuration for development and production.
"""
import os
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import field_validator


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: str = os.getenv("ENVIRONMENT", "development")

    # Debug - handle non-boolean values gracefully
    debug: bool = False

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, v):
        """Parse debug from environment, handling non-boolean values."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes")
        debug_env = os.getenv("DEBUG", "false").lower()
        return debug_env in ("true", "1", "yes")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Listener
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8080"))

    # CORS (HTTP), comma separated. Permissive until clients are known.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    # WebSocket origin allow-list, comma separated; empty means every origin is accepted
    allowed_ws_origins: str = os.getenv("ALLOWED_WS_ORIGINS", "")

    # Heartbeat: protocol ping every interval (uvicorn), a missed pong closes the peer
    # within the next interval; the registry sweep runs on the same period.
    heartbeat_interval: float = float(os.getenv("HEARTBEAT_INTERVAL", "25"))

    class Config:
        # Load .env from project root (streamgate/core/config.py -> parent.parent.parent)
        env_file = str(Path(__file__).resolve().parent.parent.parent / ".env")
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file

    @property
    def cors_origin_list(self) -> list[str]:
        return _split_csv(self.cors_origins) or ["*"]

    @property
    def ws_origin_list(self) -> list[str]:
        return _split_csv(self.allowed_ws_origins)


# Global settings instance
settings = Settings()
