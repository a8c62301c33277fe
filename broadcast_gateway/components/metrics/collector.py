"""
Metrics Collector for the Broadcast Gateway.

Centralizes metrics collection for observability.
Thread-safe counter operations for concurrent access.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any


@dataclass
class BroadcastMetrics:
    """Metrics for broadcast operations."""
    total: int = 0
    failed: int = 0
    recipients_sent: int = 0
    recipients_failed: int = 0


@dataclass
class ConnectionMetrics:
    """Metrics for connection management."""
    accepted: int = 0
    closed: int = 0
    rejected_limit: int = 0
    rejected_duplicate: int = 0
    rejected_origin: int = 0


@dataclass
class MessageMetrics:
    """Metrics for inbound messages."""
    received: int = 0
    rejected_too_big: int = 0


class MetricsCollector:
    """
    Thread-safe metrics collector for the gateway.

    Provides atomic increment operations and snapshot retrieval.

    Usage:
        metrics = MetricsCollector()
        metrics.increment_broadcast_total()
        stats = metrics.get_snapshot()
    """

    def __init__(self):
        """Initialize metrics collector."""
        self._lock = threading.Lock()
        self._broadcast = BroadcastMetrics()
        self._connection = ConnectionMetrics()
        self._message = MessageMetrics()

    # ==========================================================================
    # Broadcast Metrics
    # ==========================================================================

    def increment_broadcast_total(self) -> None:
        """Increment total broadcast count."""
        with self._lock:
            self._broadcast.total += 1

    def increment_broadcast_failed(self) -> None:
        """Increment count of broadcasts with at least one failed recipient."""
        with self._lock:
            self._broadcast.failed += 1

    def add_sent_recipients(self, count: int) -> None:
        """Add count of recipients that received a broadcast."""
        with self._lock:
            self._broadcast.recipients_sent += count

    def add_failed_recipients(self, count: int) -> None:
        """Add count of failed recipients in a broadcast."""
        with self._lock:
            self._broadcast.recipients_failed += count

    # ==========================================================================
    # Connection Metrics
    # ==========================================================================

    def increment_connection_accepted(self) -> None:
        """Increment count of connections registered."""
        with self._lock:
            self._connection.accepted += 1

    def increment_connection_closed(self) -> None:
        """Increment count of connections unregistered."""
        with self._lock:
            self._connection.closed += 1

    def increment_connection_rejected_limit(self) -> None:
        """Increment count of connections rejected due to capacity."""
        with self._lock:
            self._connection.rejected_limit += 1

    def increment_connection_rejected_duplicate(self) -> None:
        """Increment count of connections rejected as duplicate registrations."""
        with self._lock:
            self._connection.rejected_duplicate += 1

    def increment_connection_rejected_origin(self) -> None:
        """Increment count of connections rejected by the origin policy."""
        with self._lock:
            self._connection.rejected_origin += 1

    # ==========================================================================
    # Message Metrics
    # ==========================================================================

    def increment_messages_received(self) -> None:
        """Increment count of inbound messages dispatched for broadcast."""
        with self._lock:
            self._message.received += 1

    def increment_messages_rejected_too_big(self) -> None:
        """Increment count of inbound messages over the size limit."""
        with self._lock:
            self._message.rejected_too_big += 1

    # ==========================================================================
    # Snapshot
    # ==========================================================================

    def get_snapshot(self) -> dict[str, Any]:
        """
        Get a snapshot of all metrics.

        Metric names follow the pattern {category}_{metric}.
        """
        with self._lock:
            return {
                # Broadcast metrics
                "broadcasts_total": self._broadcast.total,
                "broadcasts_failed": self._broadcast.failed,
                "broadcasts_sent_recipients": self._broadcast.recipients_sent,
                "broadcasts_failed_recipients": self._broadcast.recipients_failed,
                # Connection metrics
                "connections_accepted": self._connection.accepted,
                "connections_closed": self._connection.closed,
                "connections_rejected_limit": self._connection.rejected_limit,
                "connections_rejected_duplicate": self._connection.rejected_duplicate,
                "connections_rejected_origin": self._connection.rejected_origin,
                # Message metrics
                "messages_received": self._message.received,
                "messages_rejected_too_big": self._message.rejected_too_big,
            }
