"""
WebSocket Endpoint Mixins.

Each mixin handles a single concern for WebSocket endpoints.

Mixins:
    MessageValidationMixin: Inbound frame size checks
    OriginValidationMixin: WebSocket origin header validation
    ConnectionLifecycleMixin: Lifecycle logging and audit

Usage:
    class MyEndpoint(OriginValidationMixin, WebSocketEndpointBase):
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from fastapi import WebSocket

from shared.config.logging import get_logger
from broadcast_gateway.components.core.constants import WSCloseCode

if TYPE_CHECKING:
    from broadcast_gateway.connection_manager import ConnectionManager
    from broadcast_gateway.components.core.context import WebSocketContext
    from broadcast_gateway.core.connection.transport import Payload

logger = get_logger(__name__)


# =============================================================================
# Protocols for mixin dependencies
# =============================================================================


class HasWebSocket(Protocol):
    """Protocol for classes with websocket attribute."""

    websocket: WebSocket
    endpoint_name: str
    context: "WebSocketContext | None"


class HasManager(Protocol):
    """Protocol for classes with manager attribute."""

    manager: "ConnectionManager"
    max_message_size: int


def payload_size(data: "Payload") -> int:
    """Size of a frame payload in bytes."""
    if isinstance(data, str):
        return len(data.encode("utf-8"))
    return len(data)


# =============================================================================
# MessageValidationMixin
# =============================================================================


class MessageValidationMixin:
    """
    Mixin for inbound frame validation.

    Requires:
        - self.websocket: WebSocket
        - self.manager: ConnectionManager
        - self.max_message_size: int
        - self.endpoint_name: str
        - self.context: WebSocketContext | None
    """

    async def validate_message_size(self: "HasWebSocket & HasManager", data: "Payload") -> bool:
        """
        Validate message size against configured limit.

        Args:
            data: Frame payload to validate.

        Returns:
            True if valid, False if too large (connection closed).
        """
        size = payload_size(data)
        if size > self.max_message_size:
            logger.warning(
                "Message size exceeded limit",
                endpoint=self.endpoint_name,
                identifier=self.context.identifier if self.context else "unknown",
                size=size,
                max_size=self.max_message_size,
            )
            self.manager.metrics.increment_messages_rejected_too_big()
            await self.websocket.close(
                code=WSCloseCode.MESSAGE_TOO_BIG,
                reason="Message too large",
            )
            return False
        return True


# =============================================================================
# OriginValidationMixin
# =============================================================================


class OriginValidationMixin:
    """
    Mixin for WebSocket origin header validation.

    Requires:
        - self.websocket: WebSocket
    """

    def validate_origin(self: HasWebSocket) -> bool:
        """
        Validate WebSocket origin header against allowed origins.

        Returns:
            True if origin is allowed, False otherwise.
        """
        from shared.config.settings import settings
        from broadcast_gateway.components.core.constants import validate_websocket_origin

        return validate_websocket_origin(self.get_origin(), settings)

    def get_origin(self: HasWebSocket) -> str | None:
        """Get origin header from websocket."""
        return self.websocket.headers.get("origin")


# =============================================================================
# ConnectionLifecycleMixin
# =============================================================================


class ConnectionLifecycleMixin:
    """
    Mixin for connection lifecycle logging.

    Requires:
        - self.endpoint_name: str
        - self.context: WebSocketContext | None
    """

    def log_connect(self: HasWebSocket) -> None:
        """Log connection event."""
        logger.info(
            "Client connected",
            **self.context.to_audit_dict("CONNECT") if self.context else {},
        )
        if self.context:
            self.context.audit("CONNECT")

    def log_disconnect(self: HasWebSocket, reason: str = "client_disconnect") -> None:
        """Log disconnection event."""
        logger.info(
            "Client disconnected",
            **(
                self.context.to_audit_dict("DISCONNECT", reason=reason)
                if self.context
                else {}
            ),
        )
        if self.context:
            self.context.audit("DISCONNECT", reason=reason)

    def log_connect_rejected(self: HasWebSocket, reason: str) -> None:
        """Log connection rejection event."""
        logger.warning(
            "Connection rejected",
            endpoint=self.endpoint_name,
            identifier=self.context.identifier if self.context else "unknown",
            reason=reason,
        )
        if self.context:
            self.context.audit("CONNECT_REJECTED", reason=reason)


__all__ = [
    "MessageValidationMixin",
    "OriginValidationMixin",
    "ConnectionLifecycleMixin",
    "payload_size",
    # Protocols
    "HasWebSocket",
    "HasManager",
]
