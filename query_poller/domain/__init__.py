"""
Domain package for the query poller.

Exports the statements history column layout and the row/event models. Keep this
package focused on data definitions and validation concerns.
"""

from query_poller.domain.columns import STATEMENT_COLUMNS
from query_poller.domain.models import QueryEvent, RawRow, RowLike

__all__ = [
    "STATEMENT_COLUMNS",
    "QueryEvent",
    "RawRow",
    "RowLike",
]
