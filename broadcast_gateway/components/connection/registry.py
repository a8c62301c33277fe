"""
Connection Registry - tracks the set of currently open connections.

Passive storage for the broadcast router: the router mutates it on
connect/disconnect and takes snapshots of it for every fan-out.

Invariant: a connection ID is present if and only if its state is OPEN.
Entries are inserted once on open and removed once on close.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from shared.config.logging import get_logger
from broadcast_gateway.components.core.exceptions import DuplicateRegistrationError

logger = get_logger(__name__)


class ConnectionState(str, Enum):
    """Lifecycle states of a connection. CLOSED is terminal."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class Connection:
    """Bookkeeping record for one live duplex channel."""

    id: str
    state: ConnectionState = ConnectionState.CONNECTING


class ConnectionRegistry:
    """
    Registry of open connections keyed by connection ID.

    Insertion order is preserved so snapshots iterate deterministically.

    Thread Safety:
    - register/unregister/snapshot_except form a critical section guarded
      by a threading.Lock, so the registry is safe both on a single event
      loop and when driven from several threads.
    - Snapshots are copies; later mutations never show up in them.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._connections: dict[str, Connection] = {}
        self._lock = threading.Lock()

    # =========================================================================
    # Mutation
    # =========================================================================

    def register(self, connection_id: str) -> Connection:
        """
        Insert a connection in state OPEN.

        Raises:
            DuplicateRegistrationError: If the ID is already registered.
                The existing entry is left untouched.
        """
        with self._lock:
            if connection_id in self._connections:
                raise DuplicateRegistrationError(connection_id)
            connection = Connection(id=connection_id)
            connection.state = ConnectionState.OPEN
            self._connections[connection_id] = connection
            return connection

    def unregister(self, connection_id: str) -> bool:
        """
        Remove a connection if present.

        Removing an unknown ID is a no-op (duplicate or late close notifications).

        Returns:
            True if an entry was removed, False otherwise.
        """
        with self._lock:
            connection = self._connections.pop(connection_id, None)
        if connection is None:
            return False
        connection.state = ConnectionState.CLOSED
        return True

    def clear(self) -> int:
        """
        Remove every connection (process shutdown).

        Returns:
            Number of connections removed.
        """
        with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
        for connection in connections:
            connection.state = ConnectionState.CLOSED
        return len(connections)

    # =========================================================================
    # Queries
    # =========================================================================

    def snapshot_except(self, connection_id: str) -> tuple[str, ...]:
        """
        All registered IDs other than connection_id, captured at call time.

        The result is immutable and unaffected by later registrations
        or unregistrations.
        """
        with self._lock:
            return tuple(cid for cid in self._connections if cid != connection_id)

    def ids(self) -> tuple[str, ...]:
        """All registered IDs, in registration order."""
        with self._lock:
            return tuple(self._connections)

    def size(self) -> int:
        """Number of open connections."""
        with self._lock:
            return len(self._connections)

    def contains(self, connection_id: str) -> bool:
        """Check if a connection ID is registered."""
        with self._lock:
            return connection_id in self._connections

    def get(self, connection_id: str) -> Connection | None:
        """Get the record for a connection ID, or None if not registered."""
        with self._lock:
            return self._connections.get(connection_id)

    @property
    def connections(self) -> MappingProxyType[str, Connection]:
        """Immutable view over a copy of the registry contents."""
        with self._lock:
            return MappingProxyType(dict(self._connections))

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, connection_id: object) -> bool:
        return isinstance(connection_id, str) and self.contains(connection_id)

    def get_stats(self) -> dict[str, int]:
        """Get registry statistics for monitoring."""
        return {"open_connections": self.size()}
