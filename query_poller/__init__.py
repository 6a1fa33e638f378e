"""
Query Poller - event acquisition from MySQL performance_schema.

Polls the statements history table at a bounded rate and hands completed
statements to the caller one normalized event at a time:

- PollScheduler paces polls and caches each batch of events
- build_event normalizes one raw row (fixed-point times, derived flags)
- PerformanceSchemaRowSource fetches rows over a PyMySQL connection

Storage, aggregation and reporting of events belong to the caller.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from query_poller.builder import build_event, format_picoseconds
from query_poller.config import Settings, get_settings
from query_poller.domain.models import QueryEvent, RawRow
from query_poller.errors import (
    ConfigurationError,
    MalformedRowError,
    QueryPollerError,
    SourceUnavailableError,
)
from query_poller.scheduler import Clock, PollScheduler, SchedulerConfig, SystemClock
from query_poller.sources.abstract import (
    AbstractRowSource,
    CallableRowSource,
    RowSource,
)
from query_poller.utils.logging import configure_logging, get_logger
from query_poller.utils.timefmt import format_timestamp

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Scheduling
    "Clock",
    "SystemClock",
    "PollScheduler",
    "SchedulerConfig",
    # Events
    "QueryEvent",
    "RawRow",
    "build_event",
    "format_picoseconds",
    "format_timestamp",
    # Row sources
    "RowSource",
    "AbstractRowSource",
    "CallableRowSource",
    # Errors
    "QueryPollerError",
    "ConfigurationError",
    "SourceUnavailableError",
    "MalformedRowError",
    # Logging
    "configure_logging",
    "get_logger",
]
