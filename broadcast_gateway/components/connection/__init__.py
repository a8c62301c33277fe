"""
Connection management components.

Tracks which connections are currently open.
"""

from broadcast_gateway.components.connection.registry import (
    Connection,
    ConnectionRegistry,
    ConnectionState,
)

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "ConnectionState",
]
