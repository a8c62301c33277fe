"""
WebSocket endpoint components.

Base class, mixins, and the concrete broadcast endpoint.
"""

from broadcast_gateway.components.endpoints.base import WebSocketEndpointBase
from broadcast_gateway.components.endpoints.mixins import (
    MessageValidationMixin,
    OriginValidationMixin,
    ConnectionLifecycleMixin,
)
from broadcast_gateway.components.endpoints.handlers import BroadcastEndpoint

__all__ = [
    # Base class
    "WebSocketEndpointBase",
    # Mixins
    "MessageValidationMixin",
    "OriginValidationMixin",
    "ConnectionLifecycleMixin",
    # Handlers
    "BroadcastEndpoint",
]
