"""
Connection correlation for logging.

Every WebSocket is served by its own task, so a context variable set at
the start of that task tags all log records emitted while serving it.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

# Context variable for the connection being served (task-local)
connection_id_var: ContextVar[str] = ContextVar("connection_id", default="")


def get_connection_id() -> str:
    """Get the connection ID bound to the current task."""
    return connection_id_var.get()


@contextmanager
def bind_connection_id(connection_id: str) -> Iterator[None]:
    """
    Bind a connection ID to the current context for the duration of the block.

    Usage:
        with bind_connection_id(connection_id):
            await endpoint.message_loop()
    """
    token = connection_id_var.set(connection_id)
    try:
        yield
    finally:
        connection_id_var.reset(token)


class CorrelationIdFilter:
    """
    Logging filter that adds connection_id to log records.

    Usage:
        import logging
        handler = logging.StreamHandler()
        handler.addFilter(CorrelationIdFilter())
    """

    def filter(self, record) -> bool:
        record.connection_id = connection_id_var.get() or "-"
        return True
