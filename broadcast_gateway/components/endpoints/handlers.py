"""
Concrete WebSocket Endpoint Implementations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import WebSocket

from shared.config.logging import get_logger
from broadcast_gateway.components.core.constants import WS_ENDPOINT, WSCloseCode
from broadcast_gateway.components.core.context import WebSocketContext
from broadcast_gateway.components.endpoints.base import WebSocketEndpointBase
from broadcast_gateway.components.endpoints.mixins import OriginValidationMixin

if TYPE_CHECKING:
    from broadcast_gateway.connection_manager import ConnectionManager
    from broadcast_gateway.core.connection.transport import Payload

logger = get_logger(__name__)


class BroadcastEndpoint(OriginValidationMixin, WebSocketEndpointBase):
    """
    WebSocket endpoint that relays every message to all other clients.

    Features:
    - Origin policy from ALLOWED_ORIGINS
    - Opaque text and binary payloads
    - Close code recorded as the disconnect reason
    """

    def __init__(
        self,
        websocket: WebSocket,
        manager: "ConnectionManager",
        endpoint_name: str = WS_ENDPOINT,
        max_message_size: int | None = None,
    ):
        super().__init__(
            websocket=websocket,
            manager=manager,
            endpoint_name=endpoint_name,
            max_message_size=max_message_size,
        )

    async def validate_connection(self) -> bool:
        """Reject the handshake if the origin is not allowed."""
        if self.validate_origin():
            return True

        origin = self.get_origin()
        logger.warning("WebSocket connection rejected - invalid origin", origin=origin)
        self.manager.metrics.increment_connection_rejected_origin()
        WebSocketContext.from_websocket(self.websocket, self.endpoint_name).audit(
            "ORIGIN_REJECTED",
            reason="invalid_origin",
        )
        await self.websocket.close(
            code=WSCloseCode.FORBIDDEN,
            reason="Origin not allowed",
        )
        return False

    async def register_connection(self, context: WebSocketContext) -> str:
        """Accept and register with the manager."""
        return await self.manager.connect(self.websocket)

    async def unregister_connection(self, context: WebSocketContext, reason: str) -> None:
        """Unregister from the manager."""
        if context.connection_id:
            self.manager.connection_closed(context.connection_id, reason)

    async def handle_message(self, data: "Payload") -> None:
        """Broadcast the frame to every other open connection."""
        await self.manager.message_received(self.connection_id, data)
