"""
Caller-side loop that turns a scheduler and a row source into an event stream.

The scheduler returns None both for an empty poll and for a failed one. A failed
poll does not count as a poll, so until the first success (or with no interval at
all) the scheduler retries on the next call without sleeping. Retry pacing in that
window is the caller's decision; this loop sleeps ``retry_failed_after`` seconds
(by default the scheduler interval) after such a failure.

Usage:
    from query_poller.watcher import stream_events

    for event in stream_events(scheduler, source, limit=100):
        print(event.to_dict())
"""

from __future__ import annotations

from typing import Callable, Iterator, Optional, Union

from query_poller.domain.models import QueryEvent
from query_poller.scheduler import Clock, PollScheduler, SystemClock
from query_poller.sources.abstract import RowBatch, RowSource, as_row_source
from query_poller.utils.logging import get_logger

log = get_logger(__name__)

_DEFAULT_RETRY_SECONDS = 1.0


def _retry_delay(scheduler: PollScheduler, retry_failed_after: Optional[float]) -> float:
    if retry_failed_after is not None:
        return retry_failed_after
    if scheduler.interval:
        return scheduler.interval / 1_000_000
    return _DEFAULT_RETRY_SECONDS


def stream_events(
    scheduler: PollScheduler,
    source: Union[RowSource, Callable[[], RowBatch]],
    limit: Optional[int] = None,
    retry_failed_after: Optional[float] = None,
    clock: Optional[Clock] = None,
) -> Iterator[QueryEvent]:
    """
    Yield events from ``scheduler`` until ``limit`` events were produced (or forever).

    Parameters
    ----------
    scheduler : PollScheduler
        The scheduler that paces polls and caches events.
    source : RowSource | callable
        Row source handed to every ``next_event`` call.
    limit : int | None
        Stop after this many events. None streams indefinitely.
    retry_failed_after : float | None
        Seconds to wait after a failed poll. Defaults to the scheduler interval.
    clock : Clock | None
        Sleep capability for the retry back-off.
    """
    row_source = as_row_source(source)
    clock = clock or SystemClock()
    delay = _retry_delay(scheduler, retry_failed_after)
    produced = 0

    while limit is None or produced < limit:
        failures_before = scheduler.source_failures
        event = scheduler.next_event(row_source)
        if event is not None:
            produced += 1
            yield event
            continue
        failed = scheduler.source_failures > failures_before
        # Once a poll has succeeded the scheduler sleeps before every poll itself.
        if failed and not (scheduler.interval and scheduler.polls):
            log.info(
                f"Backing off {delay:.1f}s after failed poll",
                extra={"failures": scheduler.source_failures},
            )
            clock.sleep(delay)


__all__ = ["stream_events"]
