"""
Prometheus Metrics Export for the Broadcast Gateway.

Formats internal metrics in Prometheus text exposition format.
No external dependencies required.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from broadcast_gateway.connection_manager import ConnectionManager


class MetricType(str, Enum):
    """Prometheus metric types."""

    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass(frozen=True)
class MetricDefinition:
    """Definition of a metric for Prometheus output."""

    name: str
    source: str  # Key in the stats dict (gauges) or metrics snapshot (counters)
    help_text: str
    metric_type: MetricType


GAUGES: tuple[MetricDefinition, ...] = (
    MetricDefinition(
        "broadcastgw_connections_total",
        "total_connections",
        "Current number of open WebSocket connections",
        MetricType.GAUGE,
    ),
    MetricDefinition(
        "broadcastgw_connections_max",
        "max_connections",
        "Maximum allowed WebSocket connections",
        MetricType.GAUGE,
    ),
    MetricDefinition(
        "broadcastgw_connections_utilization_percent",
        "utilization_percent",
        "Connection utilization percentage",
        MetricType.GAUGE,
    ),
    MetricDefinition(
        "broadcastgw_channels_attached",
        "channels_attached",
        "WebSocket channels held by the transport",
        MetricType.GAUGE,
    ),
)

COUNTERS: tuple[MetricDefinition, ...] = (
    MetricDefinition(
        "broadcastgw_broadcasts_total",
        "broadcasts_total",
        "Total broadcast operations",
        MetricType.COUNTER,
    ),
    MetricDefinition(
        "broadcastgw_broadcasts_failed",
        "broadcasts_failed",
        "Broadcasts with at least one failed recipient",
        MetricType.COUNTER,
    ),
    MetricDefinition(
        "broadcastgw_broadcasts_sent_recipients",
        "broadcasts_sent_recipients",
        "Total recipients that received a broadcast",
        MetricType.COUNTER,
    ),
    MetricDefinition(
        "broadcastgw_broadcasts_failed_recipients",
        "broadcasts_failed_recipients",
        "Total failed recipients",
        MetricType.COUNTER,
    ),
    MetricDefinition(
        "broadcastgw_connections_accepted",
        "connections_accepted",
        "Total connections registered",
        MetricType.COUNTER,
    ),
    MetricDefinition(
        "broadcastgw_connections_closed",
        "connections_closed",
        "Total connections unregistered",
        MetricType.COUNTER,
    ),
    MetricDefinition(
        "broadcastgw_messages_received",
        "messages_received",
        "Inbound messages dispatched for broadcast",
        MetricType.COUNTER,
    ),
    MetricDefinition(
        "broadcastgw_messages_rejected_too_big",
        "messages_rejected_too_big",
        "Inbound messages rejected for exceeding the size limit",
        MetricType.COUNTER,
    ),
)

# Rejection reasons exported as labels of one counter
REJECTION_REASONS: tuple[tuple[str, str], ...] = (
    ("limit", "connections_rejected_limit"),
    ("duplicate", "connections_rejected_duplicate"),
    ("origin", "connections_rejected_origin"),
)


class PrometheusFormatter:
    """
    Formats metrics in Prometheus text exposition format.

    Reference: https://prometheus.io/docs/instrumenting/exposition_formats/

    Usage:
        formatter = PrometheusFormatter()
        output = formatter.format_all_metrics(stats)
    """

    def format_metric(
        self,
        name: str,
        value: float | int,
        help_text: str,
        metric_type: MetricType,
        labels: dict[str, str] | None = None,
    ) -> str:
        """Format a single metric with HELP and TYPE lines."""
        lines = [
            f"# HELP {name} {help_text}",
            f"# TYPE {name} {metric_type.value}",
        ]
        if labels:
            label_str = ",".join(f'{k}="{v}"' for k, v in labels.items())
            lines.append(f"{name}{{{label_str}}} {value}")
        else:
            lines.append(f"{name} {value}")
        return "\n".join(lines)

    def format_all_metrics(self, stats: dict[str, Any]) -> str:
        """
        Format all metrics from ConnectionManager stats.

        Args:
            stats: Stats dictionary from ConnectionManager.get_stats().

        Returns:
            Complete Prometheus exposition format string.
        """
        lines: list[str] = []
        metrics = stats.get("metrics", {})

        for definition in GAUGES:
            lines.append(self.format_metric(
                definition.name,
                stats.get(definition.source, 0),
                definition.help_text,
                definition.metric_type,
            ))

        for definition in COUNTERS:
            lines.append(self.format_metric(
                definition.name,
                metrics.get(definition.source, 0),
                definition.help_text,
                definition.metric_type,
            ))

        lines.append("# HELP broadcastgw_connections_rejected_total Rejected connections by reason")
        lines.append("# TYPE broadcastgw_connections_rejected_total counter")
        for reason, source in REJECTION_REASONS:
            lines.append(
                f'broadcastgw_connections_rejected_total{{reason="{reason}"}} {metrics.get(source, 0)}'
            )

        lines.append(self.format_metric(
            "broadcastgw_scrape_timestamp",
            int(time.time()),
            "Timestamp of metrics scrape",
            MetricType.GAUGE,
        ))

        return "\n".join(lines) + "\n"


_formatter: PrometheusFormatter | None = None


def get_prometheus_formatter() -> PrometheusFormatter:
    """Get singleton Prometheus formatter."""
    global _formatter
    if _formatter is None:
        _formatter = PrometheusFormatter()
    return _formatter


def generate_prometheus_metrics(manager: "ConnectionManager") -> str:
    """Generate Prometheus exposition text from ConnectionManager stats."""
    return get_prometheus_formatter().format_all_metrics(manager.get_stats())
