"""
Utilities package for the query poller.

Exports shared helpers for logging and timestamp rendering.
Keep this package lightweight and free of domain-specific logic.
"""

from query_poller.utils.logging import configure_logging, get_logger
from query_poller.utils.timefmt import format_timestamp

__all__ = [
    "configure_logging",
    "get_logger",
    "format_timestamp",
]
