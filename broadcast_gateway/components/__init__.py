"""
Broadcast Gateway Components.

Organized into domain-specific modules:
- core/       - Foundational components (constants, context, exceptions)
- connection/ - Connection registry
- endpoints/  - WebSocket endpoints (base, mixins, handlers)
- metrics/    - Observability (collector, prometheus)

New code should import from specific submodules for clarity.
"""

# =============================================================================
# Core Components
# =============================================================================
from broadcast_gateway.components.core.constants import (
    WS_ENDPOINT,
    WSCloseCode,
    WSConstants,
    validate_websocket_origin,
)
from broadcast_gateway.components.core.context import WebSocketContext, sanitize_log_data
from broadcast_gateway.components.core.exceptions import (
    DeliveryError,
    DuplicateRegistrationError,
    GatewayError,
)

# =============================================================================
# Connection Management
# =============================================================================
from broadcast_gateway.components.connection.registry import (
    Connection,
    ConnectionRegistry,
    ConnectionState,
)

# =============================================================================
# Metrics
# =============================================================================
from broadcast_gateway.components.metrics.collector import MetricsCollector
from broadcast_gateway.components.metrics.prometheus import (
    PrometheusFormatter,
    generate_prometheus_metrics,
)

# =============================================================================
# Endpoints
# =============================================================================
from broadcast_gateway.components.endpoints.base import WebSocketEndpointBase
from broadcast_gateway.components.endpoints.handlers import BroadcastEndpoint

__all__ = [
    # Core
    "WS_ENDPOINT",
    "WSCloseCode",
    "WSConstants",
    "validate_websocket_origin",
    "WebSocketContext",
    "sanitize_log_data",
    "DeliveryError",
    "DuplicateRegistrationError",
    "GatewayError",
    # Connection
    "Connection",
    "ConnectionRegistry",
    "ConnectionState",
    # Metrics
    "MetricsCollector",
    "PrometheusFormatter",
    "generate_prometheus_metrics",
    # Endpoints
    "WebSocketEndpointBase",
    "BroadcastEndpoint",
]
