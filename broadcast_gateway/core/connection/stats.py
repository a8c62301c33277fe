"""
Connection Statistics.

Aggregates statistics from the registry, the transport and the metrics
collector into the dictionary served by the health and metrics endpoints.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from broadcast_gateway.components.connection.registry import ConnectionRegistry
    from broadcast_gateway.components.metrics.collector import MetricsCollector
    from broadcast_gateway.core.connection.transport import WebSocketTransport


class ConnectionStats:
    """Aggregates connection statistics from components."""

    def __init__(
        self,
        registry: "ConnectionRegistry",
        transport: "WebSocketTransport",
        metrics: "MetricsCollector",
        max_total_connections: int,
    ) -> None:
        self._registry = registry
        self._transport = transport
        self._metrics = metrics
        self._max_total_connections = max_total_connections

    def get_stats(self) -> dict[str, Any]:
        """
        Get connection statistics.

        Safe to call from sync contexts such as health checks.
        """
        total = self._registry.size()
        return {
            "total_connections": total,
            "max_connections": self._max_total_connections,
            "utilization_percent": round(
                total / self._max_total_connections * 100, 1
            ) if self._max_total_connections > 0 else 0,
            **self._transport.get_stats(),
            "metrics": self._metrics.get_snapshot(),
        }
