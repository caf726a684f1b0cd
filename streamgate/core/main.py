"""
streamgate - Main FastAPI application.

One listener for HTTP health checks and the /audio-stream websocket.
"""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging

from streamgate.core.config import settings
from streamgate.core.api import health, coaching
from streamgate.core.security.origin import OriginPolicy, policy_from_settings
from streamgate.core.services.heartbeat_service import HeartbeatService
from streamgate.core.websocket.gateway import AUDIO_STREAM_PATH, UpgradeGateway
from streamgate.core.websocket.handler import FrameForwarder, FrameHandler
from streamgate.core.websocket.manager import ConnectionManager
from streamgate.core.websocket.routes import websocket_endpoint

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Probed by uptime monitors; logged at DEBUG to reduce log spam
QUIET_PATHS = ("/", "/api/health")


# Lifespan event handlers
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the heartbeat with the listener; on shutdown stop it and close every socket."""
    heartbeat: HeartbeatService = app.state.heartbeat
    await heartbeat.start()
    logger.info("HTTP+WS listening on :%s", settings.port)
    logger.info("HTTP:  GET /  ->  OK")
    logger.info("WS:    GET ws://<host>%s  (trailing slash OK)", AUDIO_STREAM_PATH)

    yield

    # Shutdown
    await heartbeat.stop()
    await app.state.connections.close_all()
    logger.info("streamgate shutting down")


def create_app(
    origin_policy: Optional[OriginPolicy] = None,
    heartbeat_interval: Optional[float] = None,
    forwarder: Optional[FrameForwarder] = None,
) -> FastAPI:
    """
    Build the application with its own connection registry and heartbeat.

    Args:
        origin_policy: Websocket origin predicate; defaults to configuration
            (allow all unless ALLOWED_WS_ORIGINS is set).
        heartbeat_interval: Seconds between registry sweeps; defaults to
            HEARTBEAT_INTERVAL.
        forwarder: Optional coroutine receiving every inbound payload.
    """
    app = FastAPI(
        title="streamgate",
        description="Audio stream gateway: health checks and /audio-stream websocket",
        version="0.1.0",
        lifespan=lifespan,
    )

    connections = ConnectionManager()
    app.state.connections = connections
    app.state.frame_handler = FrameHandler(forwarder=forwarder)
    app.state.heartbeat = HeartbeatService(connections, interval=heartbeat_interval)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Websocket upgrades are vetted before routing
    app.add_middleware(
        UpgradeGateway,
        path=AUDIO_STREAM_PATH,
        origin_policy=origin_policy or policy_from_settings(),
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests. Health endpoints at DEBUG to reduce log spam."""
        path = request.url.path
        level = logger.debug if path in QUIET_PATHS else logger.info
        response = await call_next(request)
        level("%s %s - %s", request.method, path, response.status_code)
        return response

    # Error handlers
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "error": str(exc) if settings.debug else None,
            },
        )

    app.add_api_websocket_route(AUDIO_STREAM_PATH, websocket_endpoint)

    # Include routers
    app.include_router(health.router)
    app.include_router(coaching.router)

    return app


def websocket_keepalive(interval: Optional[float] = None) -> dict:
    """uvicorn options for protocol-level ping/pong: ping every interval, drop the peer if no pong within one more."""
    interval = interval if interval is not None else settings.heartbeat_interval
    return {"ws_ping_interval": interval, "ws_ping_timeout": interval}


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "streamgate.core.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        **websocket_keepalive(),
    )
