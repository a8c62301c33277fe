"""
Gateway error taxonomy.

- DuplicateRegistrationError: a connection ID was registered while already open.
  Rejects that connection attempt only.
- DeliveryError: a unicast send to one target failed. Isolated per target,
  never propagated to the sender or to other targets.

A disconnect for an unknown connection ID is not an error (duplicate close
notifications are expected transport behavior), so it has no exception type.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for broadcast gateway errors."""


class DuplicateRegistrationError(GatewayError, ConnectionError):
    """
    Raised when register() is called for a connection ID that is already open.

    Subclasses ConnectionError so endpoint code that rejects failed
    connection attempts handles it like any other refused connect.
    """

    def __init__(self, connection_id: str):
        self.connection_id = connection_id
        super().__init__(f"Connection {connection_id} is already registered")


class DeliveryError(GatewayError):
    """Raised by a transport when a unicast send to one connection fails."""

    def __init__(self, connection_id: str, reason: str = "send failed"):
        self.connection_id = connection_id
        self.reason = reason
        super().__init__(f"Delivery to {connection_id} failed: {reason}")


__all__ = [
    "GatewayError",
    "DuplicateRegistrationError",
    "DeliveryError",
]
