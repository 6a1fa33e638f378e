"""
Infrastructure package for the query poller.

Centralizes database connectivity concerns. Keep this layer focused on I/O and
resource management, decoupled from scheduling and event building.
"""

from query_poller.infrastructure.db_factory import (
    connection_factory,
    connection_kwargs,
    get_connection,
)

__all__ = [
    "connection_factory",
    "connection_kwargs",
    "get_connection",
]
