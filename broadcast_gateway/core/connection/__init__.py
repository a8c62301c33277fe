"""
Connection Management Module.

Components composed by ConnectionManager:
- router.py: Lifecycle handlers and message fan-out
- transport.py: Outbound unicast over WebSocket channels
- stats.py: Statistics aggregation
"""

from broadcast_gateway.core.connection.router import (
    BroadcastResult,
    BroadcastRouter,
    MessageEvent,
)
from broadcast_gateway.core.connection.stats import ConnectionStats
from broadcast_gateway.core.connection.transport import (
    Payload,
    Transport,
    WebSocketTransport,
    is_ws_connected,
)

__all__ = [
    "BroadcastResult",
    "BroadcastRouter",
    "MessageEvent",
    "ConnectionStats",
    "Payload",
    "Transport",
    "WebSocketTransport",
    "is_ws_connected",
]
