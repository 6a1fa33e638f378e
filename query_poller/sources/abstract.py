"""
Row source interfaces for the query poller.

A row source hands the scheduler one batch of raw statement rows per call. The
contract distinguishes two outcomes:

- ``None`` (or raising SourceUnavailableError): no valid batch could be obtained.
- an empty sequence: the fetch worked and there is simply nothing new.

Concrete sources should implement the RowSource protocol (or subclass
AbstractRowSource); plain zero-argument callables are adapted with
CallableRowSource.
"""

from __future__ import annotations

import abc
from typing import Callable, Optional, Protocol, Sequence, Union, runtime_checkable

from query_poller.domain.models import RowLike

RowBatch = Optional[Sequence[RowLike]]


@runtime_checkable
class RowSource(Protocol):
    """
    Capability that returns the current batch of completed statements.

    Calling ``fetch_rows`` repeatedly must be safe; each call reflects the state
    of the monitored table at that moment.
    """

    def fetch_rows(self) -> RowBatch:
        """
        Return the next batch of rows, or None when no valid batch is available.
        """
        ...


class AbstractRowSource(abc.ABC):
    """
    Optional ABC helper for class-based sources.
    """

    name: str = "abstract"

    @abc.abstractmethod
    def fetch_rows(self) -> RowBatch:  # pragma: no cover - interface only
        """Fetch one batch of rows."""
        raise NotImplementedError


class CallableRowSource(AbstractRowSource):
    """
    Adapt a zero-argument callback returning rows (or None) to the RowSource protocol.
    """

    name = "callable"

    def __init__(self, callback: Callable[[], RowBatch]) -> None:
        self._callback = callback

    def fetch_rows(self) -> RowBatch:
        return self._callback()


def as_row_source(source: Union[RowSource, Callable[[], RowBatch]]) -> RowSource:
    """
    Return ``source`` as a RowSource, wrapping bare callables.

    Raises
    ------
    TypeError
        If ``source`` is neither a RowSource nor callable.
    """
    if isinstance(source, RowSource):
        return source
    if callable(source):
        return CallableRowSource(source)
    raise TypeError(f"Expected a RowSource or a callable, got {type(source).__name__}")


__all__ = [
    "RowBatch",
    "RowSource",
    "AbstractRowSource",
    "CallableRowSource",
    "as_row_source",
]
