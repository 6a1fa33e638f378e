"""
Row sources for the query poller.

Re-exports the RowSource interfaces and the concrete performance_schema source so
downstream code can import from `query_poller.sources` directly.
"""

from query_poller.sources.abstract import (
    AbstractRowSource,
    CallableRowSource,
    RowBatch,
    RowSource,
    as_row_source,
)
from query_poller.sources.performance_schema import (
    PerformanceSchemaRowSource,
    build_history_query,
)

__all__ = [
    # Abstracts
    "AbstractRowSource",
    "CallableRowSource",
    "RowBatch",
    "RowSource",
    "as_row_source",
    # Concrete sources
    "PerformanceSchemaRowSource",
    "build_history_query",
]
