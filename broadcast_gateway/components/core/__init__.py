"""
Core gateway components.

Foundational components: constants, context, and exceptions.
"""

from broadcast_gateway.components.core.constants import (
    WS_ENDPOINT,
    WSCloseCode,
    WSConstants,
    validate_websocket_origin,
)
from broadcast_gateway.components.core.context import (
    WebSocketContext,
    preview_payload,
    sanitize_log_data,
)
from broadcast_gateway.components.core.exceptions import (
    DeliveryError,
    DuplicateRegistrationError,
    GatewayError,
)

__all__ = [
    # Constants
    "WS_ENDPOINT",
    "WSCloseCode",
    "WSConstants",
    "validate_websocket_origin",
    # Context
    "WebSocketContext",
    "preview_payload",
    "sanitize_log_data",
    # Exceptions
    "DeliveryError",
    "DuplicateRegistrationError",
    "GatewayError",
]
