"""
WebSocket Connection Manager.

Thin orchestrator that composes the gateway components:
- ConnectionRegistry: Set of open connection IDs
- WebSocketTransport: Live WebSocket channels, unicast send
- BroadcastRouter: Connect/message/disconnect handlers and fan-out
- ConnectionStats: Statistics aggregation

Endpoints talk to this class only; the router never sees a WebSocket.
"""

from __future__ import annotations

import asyncio
import threading
import uuid
from typing import Any, TYPE_CHECKING

from shared.config.logging import get_logger
from shared.config.settings import settings
from broadcast_gateway.components.connection.registry import ConnectionRegistry
from broadcast_gateway.components.core.constants import WSCloseCode, WSConstants
from broadcast_gateway.components.metrics.collector import MetricsCollector
from broadcast_gateway.core.connection import (
    BroadcastResult,
    BroadcastRouter,
    ConnectionStats,
    WebSocketTransport,
)

if TYPE_CHECKING:
    from fastapi import WebSocket
    from broadcast_gateway.core.connection.transport import Payload

logger = get_logger(__name__)


class ConnectionManager:
    """
    Manages WebSocket connections for the broadcast gateway.

    Configuration from settings:
    - ws_max_total_connections: Global connection limit (default: 1000)
    - ws_broadcast_batch_size: Parallel broadcast batch size (default: 50)
    """

    def __init__(
        self,
        max_total_connections: int | None = None,
        batch_size: int | None = None,
    ) -> None:
        """Initialize the connection manager with composed components."""
        self._max_total_connections = (
            max_total_connections
            if max_total_connections is not None
            else settings.ws_max_total_connections
        )
        self._metrics = MetricsCollector()
        self._registry = ConnectionRegistry()
        self._transport = WebSocketTransport()
        self._router = BroadcastRouter(
            registry=self._registry,
            transport=self._transport,
            metrics=self._metrics,
            batch_size=batch_size if batch_size is not None else settings.ws_broadcast_batch_size,
        )
        self._stats = ConnectionStats(
            registry=self._registry,
            transport=self._transport,
            metrics=self._metrics,
            max_total_connections=self._max_total_connections,
        )

        # Accepts in flight count against capacity
        self._pending_accepts = 0
        self._counter_lock = threading.Lock()
        self._shutdown = False

    # =========================================================================
    # Components
    # =========================================================================

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    @property
    def router(self) -> BroadcastRouter:
        return self._router

    @property
    def transport(self) -> WebSocketTransport:
        return self._transport

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def total_connections(self) -> int:
        """Total number of open connections."""
        return self._registry.size()

    def is_shutting_down(self) -> bool:
        """Whether shutdown has been initiated."""
        return self._shutdown

    # =========================================================================
    # Connection management
    # =========================================================================

    async def connect(
        self,
        websocket: "WebSocket",
        timeout: float = WSConstants.WS_ACCEPT_TIMEOUT,
    ) -> str:
        """
        Accept a WebSocket, assign it a connection ID and register it.

        Returns:
            The new connection ID.

        Raises:
            ConnectionError: If the server is shutting down, at capacity,
                or the handshake could not be completed.
                DuplicateRegistrationError is a ConnectionError too.
        """
        if self._shutdown:
            raise ConnectionError("Server is shutting down")

        with self._counter_lock:
            if self._registry.size() + self._pending_accepts >= self._max_total_connections:
                self._metrics.increment_connection_rejected_limit()
                raise ConnectionError(
                    f"Server at capacity ({self._max_total_connections} connections)"
                )
            self._pending_accepts += 1

        try:
            try:
                await asyncio.wait_for(websocket.accept(), timeout=timeout)
            except asyncio.TimeoutError:
                raise ConnectionError("WebSocket accept timed out")
            except Exception as e:
                raise ConnectionError(f"WebSocket accept failed: {e}") from e

            connection_id = uuid.uuid4().hex
            # Register before attaching so a duplicate never replaces the live channel
            self.connection_opened(connection_id)
            self._transport.attach(connection_id, websocket)
        finally:
            with self._counter_lock:
                self._pending_accepts -= 1

        return connection_id

    def connection_opened(self, connection_id: str) -> None:
        """Register an accepted connection with the router."""
        self._router.on_connect(connection_id)

    async def message_received(
        self,
        connection_id: str,
        payload: "Payload",
    ) -> BroadcastResult:
        """Fan one inbound message out to every other open connection."""
        return await self._router.on_message(connection_id, payload)

    def connection_closed(self, connection_id: str, reason: str | None = None) -> bool:
        """
        Unregister a connection and release its channel.

        Safe to call more than once for the same ID.
        """
        self._transport.detach(connection_id)
        return self._router.on_disconnect(connection_id, reason)

    async def shutdown(self) -> int:
        """
        Close every open socket and clear the registry.

        New connections are rejected from here on.

        Returns:
            Number of connections that were open.
        """
        self._shutdown = True
        closed = await self._transport.close_all(
            code=WSCloseCode.GOING_AWAY,
            reason="Server shutdown",
        )
        cleared = self._router.shutdown()
        logger.info("Connection manager shut down", closed=closed, cleared=cleared)
        return cleared

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_stats(self) -> dict[str, Any]:
        """Get connection statistics (safe from sync contexts)."""
        return self._stats.get_stats()
