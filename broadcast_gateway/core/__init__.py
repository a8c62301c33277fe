"""
Broadcast Gateway Core Module.

- connection/: Broadcast routing, transport, stats
"""

from broadcast_gateway.core.connection import (
    BroadcastResult,
    BroadcastRouter,
    ConnectionStats,
    MessageEvent,
    WebSocketTransport,
    is_ws_connected,
)

__all__ = [
    "BroadcastResult",
    "BroadcastRouter",
    "ConnectionStats",
    "MessageEvent",
    "WebSocketTransport",
    "is_ws_connected",
]
