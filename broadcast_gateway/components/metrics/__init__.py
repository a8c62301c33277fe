"""
Metrics and observability components.

Internal metrics collection and Prometheus exposition.
"""

from broadcast_gateway.components.metrics.collector import (
    MetricsCollector,
    BroadcastMetrics,
    ConnectionMetrics,
    MessageMetrics,
)
from broadcast_gateway.components.metrics.prometheus import (
    PrometheusFormatter,
    generate_prometheus_metrics,
)

__all__ = [
    # Metrics collector
    "MetricsCollector",
    "BroadcastMetrics",
    "ConnectionMetrics",
    "MessageMetrics",
    # Prometheus
    "PrometheusFormatter",
    "generate_prometheus_metrics",
]
