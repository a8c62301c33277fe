"""
Infrastructure helpers shared by gateway components.
"""

from shared.infrastructure.correlation import (
    CorrelationIdFilter,
    bind_connection_id,
    get_connection_id,
)

__all__ = [
    "CorrelationIdFilter",
    "bind_connection_id",
    "get_connection_id",
]
