"""
Broadcast Gateway main application.

Accepts WebSocket clients on /ws and relays every message a client sends
to all other connected clients. Health and Prometheus endpoints expose
the connection count and delivery metrics.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from shared.config.settings import settings
from shared.config.logging import setup_logging, gateway_logger as logger
from broadcast_gateway import __version__
from broadcast_gateway.connection_manager import ConnectionManager
from broadcast_gateway.components.core.constants import WS_ENDPOINT
from broadcast_gateway.components.endpoints.handlers import BroadcastEndpoint
from broadcast_gateway.components.metrics.prometheus import generate_prometheus_metrics


def create_app(manager: ConnectionManager | None = None) -> FastAPI:
    """
    Build the gateway application around a ConnectionManager.

    Args:
        manager: Manager to serve; a new one is created if omitted.
    """
    if manager is None:
        manager = ConnectionManager()

    # =========================================================================
    # Lifespan
    # =========================================================================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Configures logging on startup and closes every socket on shutdown.
        """
        setup_logging()
        for error in settings.validate_production_settings():
            logger.warning("Configuration problem", error=error)
        logger.info(
            "Starting Broadcast Gateway",
            port=settings.ws_gateway_port,
            env=settings.environment,
        )

        yield

        logger.info("Shutting down Broadcast Gateway")
        try:
            await manager.shutdown()
        except Exception as e:
            logger.warning("Error during connection manager shutdown", error=str(e))

    app = FastAPI(
        title="Broadcast Gateway",
        description="Realtime message broadcast over WebSocket",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.manager = manager

    # CORS configuration for the HTTP endpoints
    allowed_origins = settings.get_allowed_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=bool(allowed_origins),
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get("/ws/health")
    def health_check():
        """Basic health check endpoint."""
        try:
            stats = manager.get_stats()
        except Exception as e:
            logger.warning("Failed to get stats in health check", error=str(e))
            stats = {"error": "stats_unavailable"}
        return {
            "status": "shutting_down" if manager.is_shutting_down() else "healthy",
            "service": "broadcast-gateway",
            "version": app.version,
            "environment": settings.environment,
            **stats,
        }

    # =========================================================================
    # Prometheus Metrics Endpoint
    # =========================================================================

    @app.get("/ws/metrics")
    def prometheus_metrics():
        """
        Prometheus-compatible metrics endpoint.

        Configure Prometheus scrape:
            scrape_configs:
              - job_name: 'broadcast-gateway'
                static_configs:
                  - targets: ['localhost:3000']
                metrics_path: '/ws/metrics'
        """
        return PlainTextResponse(
            content=generate_prometheus_metrics(manager),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket(WS_ENDPOINT)
    async def broadcast_websocket(websocket: WebSocket):
        """Every message received here is relayed to all other clients."""
        endpoint = BroadcastEndpoint(websocket, manager)
        await endpoint.run()

    return app


app = create_app()
