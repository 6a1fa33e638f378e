"""
Domain models for the query poller.

RawRow is a validated, name-addressed view of one statements history row.
QueryEvent is the normalized, consumer-facing record built from it. Both are frozen
pydantic models; QueryEvent serializes with the event keys used by the rest of the
toolkit (``Thread_id``, ``Query_time``, ``Tmp_table`` ...).
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from query_poller.domain.columns import STATEMENT_COLUMNS
from query_poller.errors import MalformedRowError

YesNo = Literal["Yes", "No"]

_COUNTER_FIELDS = (
    "event_id",
    "timer_wait",
    "lock_time",
    "rows_affected",
    "rows_sent",
    "rows_examined",
    "created_tmp_disk_tables",
    "created_tmp_tables",
    "select_full_join",
    "select_full_range_join",
    "select_scan",
    "sort_merge_passes",
    "sort_scan",
)


class RawRow(BaseModel):
    """
    One completed statement from performance_schema.events_statements_history.

    Only the columns the event builder needs are kept; the rest of the layout is
    accepted and ignored. NULL counters and timers read as 0.
    """

    thread_id: int = Field(..., alias="THREAD_ID", description="Server thread id.")
    event_id: int = Field(0, alias="EVENT_ID", description="Per-thread event id.")
    event_name: Optional[str] = Field(None, alias="EVENT_NAME")
    timer_wait: int = Field(0, alias="TIMER_WAIT", description="Execution time (ps).")
    lock_time: int = Field(0, alias="LOCK_TIME", description="Lock wait time (ps).")
    sql_text: Union[str, bytes] = Field("", alias="SQL_TEXT")
    current_schema: Optional[str] = Field(None, alias="CURRENT_SCHEMA")
    rows_affected: int = Field(0, alias="ROWS_AFFECTED")
    rows_sent: int = Field(0, alias="ROWS_SENT")
    rows_examined: int = Field(0, alias="ROWS_EXAMINED")
    created_tmp_disk_tables: int = Field(0, alias="CREATED_TMP_DISK_TABLES")
    created_tmp_tables: int = Field(0, alias="CREATED_TMP_TABLES")
    select_full_join: int = Field(0, alias="SELECT_FULL_JOIN")
    select_full_range_join: int = Field(0, alias="SELECT_FULL_RANGE_JOIN")
    select_scan: int = Field(0, alias="SELECT_SCAN")
    sort_merge_passes: int = Field(0, alias="SORT_MERGE_PASSES")
    sort_scan: int = Field(0, alias="SORT_SCAN")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator(*_COUNTER_FIELDS, mode="before")
    @classmethod
    def _null_counter_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("sql_text", mode="before")
    @classmethod
    def _null_sql_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_row(cls, row: "RowLike") -> "RawRow":
        """
        Build a RawRow from a positional tuple, a column-keyed mapping, or a RawRow.

        Raises
        ------
        MalformedRowError
            If the row arity does not match the column layout, THREAD_ID is
            missing, or a value cannot be coerced.
        """
        if isinstance(row, RawRow):
            return row
        if isinstance(row, Mapping):
            data: Dict[str, Any] = {str(key).upper(): value for key, value in row.items()}
        elif isinstance(row, Sequence) and not isinstance(row, (str, bytes)):
            if len(row) != len(STATEMENT_COLUMNS):
                raise MalformedRowError(
                    f"Expected {len(STATEMENT_COLUMNS)} columns, got {len(row)}"
                )
            data = dict(zip(STATEMENT_COLUMNS, row))
        else:
            raise MalformedRowError(f"Unsupported row type {type(row).__name__}")

        if "THREAD_ID" not in data:
            raise MalformedRowError("Row has no THREAD_ID column")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise MalformedRowError(
                f"Invalid statement row ({exc.error_count()} field error(s))"
            ) from exc


RowLike = Union[RawRow, Mapping[str, Any], Sequence[Any]]


class QueryEvent(BaseModel):
    """
    Normalized representation of one completed query execution.
    """

    thread_id: int = Field(..., alias="Thread_id")
    db: Optional[str] = Field(None, alias="db")
    user: str = Field(..., alias="user")
    host: str = Field(..., alias="host")
    arg: str = Field(..., alias="arg", description="SQL text, verbatim.")
    byte_length: int = Field(..., alias="bytes", description="Byte length of the SQL text.")
    ts: str = Field(..., alias="ts", description="Display timestamp of the poll.")
    query_time: str = Field(..., alias="Query_time", description="Seconds, 6 decimals.")
    lock_time: str = Field(..., alias="Lock_time", description="Seconds, 6 decimals.")
    rows_examined: int = Field(..., alias="Rows_examined")
    rows_sent: int = Field(..., alias="Rows_sent")
    rows_affected: int = Field(..., alias="Rows_affected")
    tmp_tables: int = Field(..., alias="Tmp_tables")
    tmp_disk_tables: int = Field(..., alias="Tmp_disk_tables")
    tmp_table: YesNo = Field(..., alias="Tmp_table")
    tmp_table_on_disk: YesNo = Field(..., alias="Tmp_table_on_disk")
    full_scan: YesNo = Field(..., alias="Full_scan")
    full_join: int = Field(..., alias="Full_join")
    filesort: YesNo = Field(..., alias="Filesort")
    merge_passes: int = Field(..., alias="Merge_passes")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @property
    def uses_tmp_table(self) -> bool:
        return self.tmp_table == "Yes"

    @property
    def tmp_table_on_disk_used(self) -> bool:
        return self.tmp_table_on_disk == "Yes"

    @property
    def did_full_scan(self) -> bool:
        return self.full_scan == "Yes"

    @property
    def did_filesort(self) -> bool:
        return self.filesort == "Yes"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the toolkit's event keys."""
        return self.model_dump(by_alias=True)


__all__ = ["RawRow", "RowLike", "QueryEvent", "YesNo"]
