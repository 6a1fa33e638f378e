"""
Row-to-event normalization.

``build_event`` is a pure function: the same row and reference time always produce
the same QueryEvent. Timer columns are picoseconds; they are rendered as seconds
with exactly six decimals, truncated rather than rounded so the output matches the
slow-log event format byte for byte.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
from typing import Callable, Union

from query_poller.domain.columns import (
    PICOSECONDS_PER_SECOND,
    TIME_FIELD_DECIMALS,
    UNKNOWN_PLACEHOLDER,
)
from query_poller.domain.models import QueryEvent, RawRow, RowLike
from query_poller.utils.logging import get_logger
from query_poller.utils.timefmt import format_timestamp

log = get_logger(__name__)

TimestampFormatter = Callable[[Union[int, float]], str]

_QUANTUM = Decimal(1).scaleb(-TIME_FIELD_DECIMALS)


def format_picoseconds(value: int) -> str:
    """
    Convert a picosecond counter to fixed-point seconds, truncated to 6 decimals.

    Decimal arithmetic keeps the division exact, so large or tiny values never go
    through exponential notation.

    >>> format_picoseconds(1_234_567_000_000)
    '1.234567'
    """
    seconds = Decimal(int(value)) / PICOSECONDS_PER_SECOND
    return format(seconds.quantize(_QUANTUM, rounding=ROUND_DOWN), "f")


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _sql_bytes(sql: Union[str, bytes]) -> int:
    if isinstance(sql, bytes):
        return len(sql)
    return len(sql.encode("utf-8", errors="surrogatepass"))


def _sql_text(sql: Union[str, bytes]) -> str:
    if isinstance(sql, bytes):
        return sql.decode("utf-8", errors="replace")
    return sql


def build_event(
    row: RowLike,
    reference_time: Union[int, float],
    ts_formatter: TimestampFormatter = format_timestamp,
    trace: bool = False,
) -> QueryEvent:
    """
    Build a QueryEvent from one statements history row.

    Parameters
    ----------
    row : RawRow | Mapping | Sequence
        The raw row; non-RawRow inputs are validated via ``RawRow.from_row``.
    reference_time : int | float
        Unix time of the poll that returned the row; stamped into ``ts``.
    ts_formatter : callable
        Renders ``reference_time`` for display.
    trace : bool
        Log the built event at DEBUG level.
    """
    raw = RawRow.from_row(row)

    event = QueryEvent(
        thread_id=raw.thread_id,
        db=raw.current_schema,
        user=UNKNOWN_PLACEHOLDER,
        host=UNKNOWN_PLACEHOLDER,
        arg=_sql_text(raw.sql_text),
        byte_length=_sql_bytes(raw.sql_text),
        ts=ts_formatter(reference_time),
        query_time=format_picoseconds(raw.timer_wait),
        lock_time=format_picoseconds(raw.lock_time),
        rows_examined=raw.rows_examined,
        rows_sent=raw.rows_sent,
        rows_affected=raw.rows_affected,
        tmp_tables=raw.created_tmp_tables,
        tmp_disk_tables=raw.created_tmp_disk_tables,
        tmp_table=_yes_no(raw.created_tmp_tables > 0),
        tmp_table_on_disk=_yes_no(raw.created_tmp_disk_tables > 0),
        full_scan=_yes_no(raw.select_scan > 0),
        full_join=raw.select_full_join + raw.select_full_range_join,
        filesort=_yes_no(raw.sort_scan > 0 or raw.sort_merge_passes > 0),
        merge_passes=raw.sort_merge_passes,
    )
    if trace:
        log.debug("Properties of event", extra={"event": event.to_dict()})
    return event


__all__ = ["build_event", "format_picoseconds", "TimestampFormatter"]
