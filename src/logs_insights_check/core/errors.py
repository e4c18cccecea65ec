"""Error taxonomy for the check.

Only TransientPollError and MalformedResponseError are recovered locally
(retried on the next poll tick); everything else ends the invocation with an
UNKNOWN result.
"""

from __future__ import annotations

from .models import QueryResult


class LogsInsightsCheckError(Exception):
    """Base class for all check errors."""


class SubmissionError(LogsInsightsCheckError):
    """StartQuery was rejected or never reached the service."""


class TransientPollError(LogsInsightsCheckError):
    """GetQueryResults failed at the transport level."""


class MalformedResponseError(LogsInsightsCheckError):
    """GetQueryResults returned a payload that cannot be classified."""


class QueryCancelError(LogsInsightsCheckError):
    """StopQuery failed."""


class RemoteFailure(LogsInsightsCheckError):
    """The query itself ended as Failed or Cancelled."""

    def __init__(self, reason: str, result: QueryResult) -> None:
        super().__init__(reason)
        self.reason = reason
        self.result = result


class CursorStoreError(LogsInsightsCheckError):
    """The cursor file exists but could not be read."""


class CursorPersistError(LogsInsightsCheckError):
    """The cursor could not be written after a finished query."""


class CancellationError(LogsInsightsCheckError):
    """The invocation was interrupted before the query finished."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
