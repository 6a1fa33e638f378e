"""
Poll scheduler: rate-limited polling with an event cache.

The caller asks for one event at a time via ``next_event``. Cached events are
returned immediately; when the cache is empty the scheduler sleeps out the
configured interval (never before the first poll), fetches one batch from the row
source, turns every row into a QueryEvent and caches them in row order.

Callers should not sleep between calls themselves: pacing is the scheduler's job.
A caller that is slow between calls delays polling by its own slowness on top of
the interval.

Usage:
    from query_poller.scheduler import PollScheduler, SchedulerConfig

    scheduler = PollScheduler(SchedulerConfig(interval=1_000_000))
    while True:
        event = scheduler.next_event(source)
        if event is not None:
            handle(event)
"""

from __future__ import annotations

import time
from collections import deque
from typing import Callable, Deque, List, Optional, Protocol, Union

from pydantic import BaseModel, Field

from query_poller.builder import TimestampFormatter, build_event
from query_poller.domain.columns import MIN_POLL_INTERVAL_US
from query_poller.domain.models import QueryEvent, RawRow
from query_poller.errors import ConfigurationError, SourceUnavailableError
from query_poller.sources.abstract import RowBatch, RowSource, as_row_source
from query_poller.utils.logging import get_logger
from query_poller.utils.timefmt import format_timestamp

log = get_logger(__name__)


class Clock(Protocol):
    """Wall clock and sleep capability used by the scheduler."""

    def time(self) -> float: ...

    def sleep(self, seconds: float) -> None: ...


class SystemClock:
    """Clock backed by ``time.time`` and ``time.sleep``."""

    def time(self) -> float:
        return time.time()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


class SchedulerConfig(BaseModel):
    """
    Construction options for PollScheduler.
    """

    interval: Optional[int] = Field(
        None, description="Minimum microseconds between polls; None disables sleeping."
    )
    debug: bool = Field(False, description="Emit verbose per-poll tracing at DEBUG level.")

    model_config = {"frozen": True}


class PollScheduler:
    """
    Owns the poll counter, last-poll timestamp and the FIFO event cache.

    Not safe for concurrent use: one caller drives one scheduler.

    Raises
    ------
    ConfigurationError
        If ``config.interval`` is set below one second (1,000,000 microseconds).
    """

    def __init__(
        self,
        config: Optional[SchedulerConfig] = None,
        *,
        clock: Optional[Clock] = None,
        ts_formatter: TimestampFormatter = format_timestamp,
    ) -> None:
        config = config or SchedulerConfig()
        if config.interval is not None and config.interval < MIN_POLL_INTERVAL_US:
            raise ConfigurationError(
                f"Polling performance_schema requires an interval of at least "
                f"{MIN_POLL_INTERVAL_US} microseconds (1 second), got {config.interval}"
            )

        self.config = config
        self._clock: Clock = clock or SystemClock()
        self._ts_formatter = ts_formatter
        self._polls = 0
        self._last_poll: float = 0
        self._last_poll_elapsed: Optional[float] = None
        self._source_failures = 0
        self._event_cache: Deque[QueryEvent] = deque()

    @property
    def interval(self) -> Optional[int]:
        return self.config.interval

    @property
    def polls(self) -> int:
        """Number of successful polls so far."""
        return self._polls

    @property
    def last_poll(self) -> float:
        """Reference time of the last successful poll, 0 before the first one."""
        return self._last_poll

    @property
    def last_poll_elapsed(self) -> Optional[float]:
        return self._last_poll_elapsed

    @property
    def pending(self) -> int:
        """Events cached but not yet delivered."""
        return len(self._event_cache)

    @property
    def source_failures(self) -> int:
        """Poll attempts where the source returned no valid batch."""
        return self._source_failures

    def _trace(self, message: str, **fields: object) -> None:
        if self.config.debug:
            log.debug(message, extra=fields)

    def _fetch(self, source: RowSource) -> Optional[List[RawRow]]:
        """
        Fetch and validate one batch. Returns None when the poll failed.

        Every row is validated before the caller touches scheduler state, so a bad
        row fails the whole poll rather than leaving a partial batch cached.
        """
        try:
            batch: RowBatch = source.fetch_rows()
            if batch is None:
                log.warning(
                    "Row source did not return a batch; no event for this call",
                    extra={"source": type(source).__name__},
                )
                return None
            return [RawRow.from_row(row) for row in batch]
        except SourceUnavailableError as exc:
            log.warning(
                f"Row source unavailable: {exc}",
                extra={"source": type(source).__name__, "error": type(exc).__name__},
            )
            return None

    def next_event(
        self,
        row_source: Union[RowSource, Callable[[], RowBatch]],
        reference_time: Optional[float] = None,
        elapsed: Optional[float] = None,
    ) -> Optional[QueryEvent]:
        """
        Return the next event, polling the row source when the cache is empty.

        Parameters
        ----------
        row_source : RowSource | callable
            Supplies the batch for a poll. Required on every call.
        reference_time : float, optional
            Unix time to stamp on events from this poll (testing seam). Defaults to
            the clock's time after the fetch.
        elapsed : float, optional
            Poll duration override (testing seam). Defaults to the measured time
            spent in the fetch.

        Returns
        -------
        QueryEvent | None
            None when the poll failed or returned an empty batch.
        """
        source = as_row_source(row_source)

        if self._event_cache:
            self._trace("Returning cached event", pending=len(self._event_cache))
            return self._event_cache.popleft()

        if self.config.interval and self._polls:
            self._trace("Sleeping between polls", interval_us=self.config.interval)
            self._clock.sleep(self.config.interval / 1_000_000)

        self._trace("Polling row source", source=type(source).__name__)
        start = self._clock.time() if elapsed is None else 0.0
        rows = self._fetch(source)
        if rows is None:
            # A failed attempt does not count as a poll; polls and last_poll stay put.
            self._source_failures += 1
            return None

        if reference_time is None:
            reference_time = self._clock.time()
        if elapsed is None:
            elapsed = reference_time - start
        self._polls += 1
        self._trace("Rows fetched", rows=len(rows), elapsed_seconds=elapsed, poll=self._polls)

        for raw in rows:
            self._event_cache.append(
                build_event(raw, reference_time, self._ts_formatter, trace=self.config.debug)
            )

        self._last_poll = reference_time
        self._last_poll_elapsed = elapsed

        event = self._event_cache.popleft() if self._event_cache else None
        self._trace("Events in cache", pending=len(self._event_cache))
        return event


__all__ = [
    "Clock",
    "SystemClock",
    "SchedulerConfig",
    "PollScheduler",
]
