"""
WebSocket Endpoint Base Class.

Drives one WebSocket from handshake to close:
validate, register, receive loop, unregister.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from shared.config.logging import get_logger
from shared.infrastructure.correlation import bind_connection_id
from broadcast_gateway.components.core.constants import WSCloseCode
from broadcast_gateway.components.core.context import WebSocketContext, preview_payload
from broadcast_gateway.components.core.exceptions import DuplicateRegistrationError
from broadcast_gateway.components.endpoints.mixins import (
    ConnectionLifecycleMixin,
    MessageValidationMixin,
)

if TYPE_CHECKING:
    from broadcast_gateway.connection_manager import ConnectionManager
    from broadcast_gateway.core.connection.transport import Payload

logger = get_logger(__name__)


class WebSocketEndpointBase(
    MessageValidationMixin,
    ConnectionLifecycleMixin,
    ABC,
):
    """
    Base class for WebSocket endpoints.

    Encapsulates common patterns:
    - Connection lifecycle (accept, receive loop, disconnect)
    - Message size validation
    - Audit logging

    Subclasses implement:
    - validate_connection(): Pre-accept checks (origin policy)
    - register_connection(): Register with ConnectionManager
    - unregister_connection(): Unregister on close
    - handle_message(): Process one inbound frame

    Usage:
        endpoint = BroadcastEndpoint(websocket, manager)
        await endpoint.run()
    """

    def __init__(
        self,
        websocket: WebSocket,
        manager: "ConnectionManager",
        endpoint_name: str,
        max_message_size: int | None = None,
    ):
        """
        Initialize the endpoint handler.

        Args:
            websocket: The WebSocket connection.
            manager: ConnectionManager instance.
            endpoint_name: Name for logging (e.g., "/ws").
            max_message_size: Frame size limit in bytes (default from settings).
        """
        if max_message_size is None:
            from shared.config.settings import settings
            max_message_size = settings.ws_max_message_size

        self.websocket = websocket
        self.manager = manager
        self.endpoint_name = endpoint_name
        self.max_message_size = max_message_size

        self.context: WebSocketContext | None = None
        self.connection_id: str | None = None
        self._is_running = False

    @abstractmethod
    async def validate_connection(self) -> bool:
        """
        Run pre-accept checks.

        Returns:
            True to proceed. If False, the WebSocket must already be closed.
        """
        pass

    @abstractmethod
    async def register_connection(self, context: WebSocketContext) -> str:
        """
        Register the connection with ConnectionManager.

        Returns:
            The assigned connection ID.

        Raises:
            ConnectionError: If registration fails.
        """
        pass

    @abstractmethod
    async def unregister_connection(self, context: WebSocketContext, reason: str) -> None:
        """Unregister the connection on close."""
        pass

    async def handle_message(self, data: "Payload") -> None:
        """
        Handle one inbound frame.

        Default implementation logs and drops it.
        """
        logger.debug(
            "Message received",
            endpoint=self.endpoint_name,
            identifier=self.context.identifier if self.context else "unknown",
            message=preview_payload(data),
        )

    async def run(self) -> None:
        """
        Main entry point - run the WebSocket endpoint.

        Handles the complete lifecycle:
        1. Validate connection
        2. Create context
        3. Register connection
        4. Receive loop
        5. Unregister on close
        """
        # Step 1: Validate
        if not await self.validate_connection():
            return

        # Step 2: Create context
        self.context = WebSocketContext.from_websocket(self.websocket, self.endpoint_name)

        # Step 3: Register connection
        try:
            self.connection_id = await self.register_connection(self.context)
        except ConnectionError as e:
            self.log_connect_rejected(str(e))
            code = (
                WSCloseCode.DUPLICATE_CONNECTION
                if isinstance(e, DuplicateRegistrationError)
                else WSCloseCode.SERVER_OVERLOADED
            )
            await self._close_quietly(code, "Connection rejected")
            return
        except Exception as e:
            logger.error(
                "Unexpected error during connection",
                endpoint=self.endpoint_name,
                identifier=self.context.identifier,
                error=str(e),
            )
            await self._close_quietly(WSCloseCode.SERVER_ERROR, "Internal error")
            return

        self.context.connection_id = self.connection_id
        self.log_connect()

        # Step 4: Receive loop
        reason = str(int(WSCloseCode.NO_STATUS))
        self._is_running = True
        with bind_connection_id(self.connection_id):
            try:
                reason = await self._message_loop()
            except Exception as e:
                reason = "error"
                logger.error(
                    "Error in receive loop",
                    endpoint=self.endpoint_name,
                    identifier=self.context.identifier,
                    error=str(e),
                    exc_info=True,
                )
            finally:
                # Step 5: Unregister
                self._is_running = False
                await self.unregister_connection(self.context, reason)
                self.log_disconnect(reason)

    async def _message_loop(self) -> str:
        """
        Receive frames until the connection closes.

        Text frames are passed on as str, binary frames as bytes.

        Returns:
            The disconnect reason (the close code as a string).
        """
        while self._is_running:
            message = await self.websocket.receive()
            message_type = message.get("type")

            if message_type == "websocket.disconnect":
                return str(message.get("code", int(WSCloseCode.NO_STATUS)))

            if message_type != "websocket.receive":
                continue

            data: Any = message.get("text")
            if data is None:
                data = message.get("bytes")
            if data is None:
                continue

            if not await self.validate_message_size(data):
                return str(int(WSCloseCode.MESSAGE_TOO_BIG))

            await self.handle_message(data)

        return str(int(WSCloseCode.NORMAL))

    async def _close_quietly(self, code: int, reason: str) -> None:
        """Close the WebSocket unless it is already closed."""
        if self.websocket.application_state == WebSocketState.DISCONNECTED:
            return
        try:
            await self.websocket.close(code=code, reason=reason)
        except Exception as e:
            logger.debug("Close after rejection failed", error=str(e))
