"""
WebSocket Context for audit logging.

Encapsulates connection metadata for consistent audit logging.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from broadcast_gateway.components.core.constants import WSConstants

if TYPE_CHECKING:
    from fastapi import WebSocket


# Control characters and Unicode direction overrides stripped from log data
_CONTROL_CHAR_PATTERN = re.compile(
    r'[\x00-\x1f\x7f-\x9f'  # ASCII control characters
    r'\u200b-\u200f'  # Zero-width and direction marks
    r'\u202a-\u202e'  # Bidirectional text formatting (RTL override, etc.)
    r'\u2066-\u2069'  # Isolate formatting characters
    r'\ufeff]'  # BOM / Zero-width no-break space
)


def sanitize_log_data(data: str, max_length: int = 100) -> str:
    """
    Sanitize client-provided data before logging.

    Truncates first, then removes control characters and escapes
    JSON-dangerous characters, so the output length stays predictable.

    Args:
        data: Raw client data.
        max_length: Maximum length to include in logs.

    Returns:
        Sanitized, truncated string safe for structured logging.
    """
    truncated = data[:max_length] if len(data) > max_length else data
    was_truncated = len(data) > max_length

    # Remove control characters and direction overrides
    sanitized = _CONTROL_CHAR_PATTERN.sub('', truncated)

    # Replace backslashes first to avoid double-escaping
    sanitized = sanitized.replace('\\', '\\\\')
    sanitized = sanitized.replace('"', '\\"')

    if was_truncated:
        return sanitized + "..."
    return sanitized


def preview_payload(
    payload: str | bytes,
    max_length: int = WSConstants.LOG_PAYLOAD_PREVIEW,
) -> str:
    """Loggable preview of an opaque payload. Binary frames are summarized by size."""
    if isinstance(payload, (bytes, bytearray)):
        return f"<{len(payload)} bytes>"
    return sanitize_log_data(payload, max_length)


@dataclass
class WebSocketContext:
    """
    Context object for WebSocket connection metadata.

    Usage:
        ctx = WebSocketContext.from_websocket(websocket, "/ws")
        ctx.connection_id = connection_id
        ctx.audit("CONNECT")
        # ... later
        ctx.audit("DISCONNECT", reason="1000")
    """

    endpoint: str
    origin: str | None = None
    client: str | None = None
    connection_id: str | None = None

    @classmethod
    def from_websocket(cls, websocket: "WebSocket", endpoint: str) -> "WebSocketContext":
        """
        Create context from a WebSocket connection.

        The connection ID is only known after accept; set it once assigned.
        """
        client = None
        if websocket.client is not None:
            client = f"{websocket.client.host}:{websocket.client.port}"
        return cls(
            endpoint=endpoint,
            origin=websocket.headers.get("origin"),
            client=client,
        )

    def to_audit_dict(self, event_type: str, **extra: Any) -> dict[str, Any]:
        """
        Convert to dictionary for audit logging.

        Only includes non-None fields to reduce log noise.
        """
        result: dict[str, Any] = {
            "event_type": event_type,
            "endpoint": self.endpoint,
        }
        if self.connection_id:
            result["connection_id"] = self.connection_id
        if self.origin:
            result["origin"] = self.origin
        if self.client:
            result["client"] = self.client

        result.update(extra)
        return result

    def audit(
        self,
        event_type: str,
        logger_func: Any = None,
        **extra: Any,
    ) -> None:
        """
        Log an audit event.

        Args:
            event_type: The audit event type.
            logger_func: Optional custom logger function (default: audit_ws_connection).
            **extra: Additional fields to log.
        """
        if logger_func is None:
            from shared.config.logging import audit_ws_connection
            logger_func = audit_ws_connection

        logger_func(**self.to_audit_dict(event_type, **extra))

    @property
    def identifier(self) -> str:
        """Human-readable identifier for this connection."""
        if self.connection_id:
            return f"conn:{self.connection_id[:8]}"
        if self.client:
            return f"peer:{self.client}"
        return "anonymous"
