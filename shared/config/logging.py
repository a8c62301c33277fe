"""
Centralized structured logging for the gateway.
Uses Python's standard logging with JSON formatting for production.

Log records carry the connection ID of the WebSocket being served
(see shared.infrastructure.correlation).
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings


def _bound_connection(record: logging.LogRecord) -> str | None:
    """Connection ID tagged on the record by CorrelationIdFilter, if any."""
    connection_id = getattr(record, "connection_id", None)
    if connection_id and connection_id != "-":
        return connection_id
    return None


def _context_data(record: logging.LogRecord) -> dict[str, Any] | None:
    return getattr(record, "extra_data", None) or None


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line, for log shippers in production.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        connection_id = _bound_connection(record)
        if connection_id:
            entry["connection_id"] = connection_id

        data = _context_data(record)
        if data:
            entry["data"] = data

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if settings.debug:
            entry["source"] = f"{record.filename}:{record.lineno} in {record.funcName}"

        return json.dumps(entry, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    Colored single-line output for a terminal.
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, self.RESET)
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        parts = [f"{color}[{clock}] {record.levelname:8}{self.RESET}"]

        connection_id = _bound_connection(record)
        if connection_id:
            # Short prefix is enough to follow one client through the log
            parts.append(f"{self.DIM}[{connection_id[:8]}]{self.RESET}")

        parts.append(f"{record.name}: {record.getMessage()}")
        line = " ".join(parts)

        data = _context_data(record)
        if data:
            line += " (" + " | ".join(f"{key}={value}" for key, value in data.items()) + ")"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class StructuredLogger(logging.Logger):
    """
    Logger accepting keyword context on every call.

        logger.info("Broadcast completed", sent=3, failed=0)

    Keywords other than the standard logging ones end up in
    ``record.extra_data``.
    """

    def _log(
        self,
        level: int,
        msg: Any,
        args: Any,
        exc_info: Any = None,
        extra: dict | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **context: Any,
    ) -> None:
        extra = dict(extra) if extra else {}
        extra["extra_data"] = context or None
        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=extra,
            stack_info=stack_info,
            stacklevel=stacklevel + 1,
        )


logging.setLoggerClass(StructuredLogger)


def setup_logging() -> None:
    """
    Configure logging for the application.
    Call this once at application startup.
    """
    # Import here to avoid circular imports
    from shared.infrastructure.correlation import CorrelationIdFilter

    log_level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(CorrelationIdFilter())

    # Use appropriate formatter based on environment
    if settings.environment == "production":
        formatter = StructuredFormatter()
    else:
        formatter = DevelopmentFormatter()

    handler.setFormatter(formatter)

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a logger instance with the given name.

    Usage:
        from shared.config.logging import get_logger
        logger = get_logger(__name__)

        logger.info("Broadcast completed", sent=3, failed=0)
        logger.error("Unexpected error", exc_info=True)
    """
    return logging.getLogger(name)  # type: ignore


# Pre-configured loggers for common modules
gateway_logger = get_logger("broadcast_gateway")

# Dedicated connection audit logger
security_audit_logger = get_logger("security.audit")


def audit_ws_connection(
    event_type: str,
    endpoint: str,
    connection_id: str | None = None,
    origin: str | None = None,
    client: str | None = None,
    reason: str | None = None,
    **extra: Any,
) -> None:
    """
    Log WebSocket connection lifecycle events.

    Creates a structured audit trail for connects, disconnects and rejections.

    Args:
        event_type: Type of event (CONNECT, DISCONNECT, CONNECT_REJECTED, ORIGIN_REJECTED)
        endpoint: WebSocket endpoint (/ws)
        connection_id: Connection ID assigned at accept time
        origin: Origin header value
        client: Remote peer address ("host:port")
        reason: Reason for event (close code, rejection cause)
        **extra: Additional context data
    """
    security_audit_logger.info(
        f"WS_AUDIT: {event_type}",
        event_type=event_type,
        endpoint=endpoint,
        connection_id=connection_id,
        origin=origin,
        client=client,
        reason=reason,
        **extra,
    )
