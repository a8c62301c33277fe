"""
Broadcast Gateway Constants.

Centralized constants with documentation explaining the rationale for each value.
"""

from enum import IntEnum
from typing import Final

from shared.config.logging import get_logger

__all__ = [
    "WSCloseCode",
    "WSConstants",
    "WS_ENDPOINT",
    "validate_websocket_origin",
]

logger = get_logger(__name__)


class WSCloseCode(IntEnum):
    """
    WebSocket close codes used by the gateway.

    Standard codes (1000-1999) from RFC 6455.
    Custom codes (4000-4999) for application-specific errors.
    """

    # Standard codes (RFC 6455)
    NORMAL = 1000  # Normal closure
    GOING_AWAY = 1001  # Server shutting down or client navigating away
    NO_STATUS = 1005  # Peer closed without a status code
    MESSAGE_TOO_BIG = 1009  # Message too large to process
    SERVER_ERROR = 1011  # Unexpected server error
    SERVER_OVERLOADED = 1013  # Server overloaded, try again later

    # Custom application codes (4000-4999)
    FORBIDDEN = 4003  # Origin not allowed
    DUPLICATE_CONNECTION = 4009  # Connection ID already registered


class WSConstants:
    """
    Gateway operational constants.

    Values that operators may need to tune live in shared.config.settings;
    these are internal implementation details.
    """

    # WS_ACCEPT_TIMEOUT: 5 seconds
    # Rationale: WebSocket handshake should complete within TCP timeout.
    # 5 seconds handles slow networks while rejecting stuck connections.
    WS_ACCEPT_TIMEOUT: Final[float] = 5.0

    # SEND_TIMEOUT: 5 seconds
    # Upper bound for one outbound frame. A client that stops reading
    # counts as a failed delivery instead of stalling the broadcast.
    SEND_TIMEOUT: Final[float] = 5.0

    # SHUTDOWN_CLOSE_TIMEOUT: 5 seconds
    # Upper bound for closing every socket during shutdown.
    SHUTDOWN_CLOSE_TIMEOUT: Final[float] = 5.0

    # LOG_PAYLOAD_PREVIEW: 100 characters
    # Client payloads are opaque; at most this much reaches debug logs.
    LOG_PAYLOAD_PREVIEW: Final[int] = 100


# Path of the broadcast endpoint
WS_ENDPOINT: Final[str] = "/ws"


def validate_websocket_origin(origin: str | None, settings: object) -> bool:
    """
    Validate WebSocket origin header against allowed origins.

    An empty allowed list (ALLOWED_ORIGINS unset or "*") accepts every origin,
    including connections without an Origin header (non-browser clients).

    Args:
        origin: The Origin header value, or None if not present.
        settings: Settings object with get_allowed_origins() and environment.

    Returns:
        True if origin is allowed, False otherwise.
    """
    allowed = settings.get_allowed_origins()
    if not allowed:
        return True

    if not origin:
        is_dev = getattr(settings, "environment", "production") == "development"
        if is_dev:
            logger.warning(
                "WebSocket connection with missing Origin header (allowed in dev mode only)",
            )
            return True
        logger.warning(
            "WebSocket connection rejected: missing Origin header in production",
        )
        return False

    if origin in allowed:
        return True

    logger.warning(
        "WebSocket connection rejected: origin not in allowed list",
        origin=origin,
        allowed_count=len(allowed),
    )
    return False

