"""
Exception hierarchy for the query poller.

ConfigurationError is fatal and raised at construction time. SourceUnavailableError
(and its MalformedRowError subclass) is non-fatal: the scheduler catches it, logs it,
and yields no event for that call.
"""

from __future__ import annotations


class QueryPollerError(Exception):
    """Base class for all query poller errors."""


class ConfigurationError(QueryPollerError, ValueError):
    """Invalid scheduler or source configuration."""


class SourceUnavailableError(QueryPollerError):
    """The row source could not produce a valid batch for this poll."""


class MalformedRowError(SourceUnavailableError):
    """A row does not match the statements history column layout."""


__all__ = [
    "QueryPollerError",
    "ConfigurationError",
    "SourceUnavailableError",
    "MalformedRowError",
]
