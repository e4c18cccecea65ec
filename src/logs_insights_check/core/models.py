"""Core data models for the Logs Insights check."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class QueryStatus(str, Enum):
    """Query states reported by CloudWatch Logs Insights."""

    SCHEDULED = "Scheduled"
    RUNNING = "Running"
    COMPLETE = "Complete"
    FAILED = "Failed"
    CANCELLED = "Cancelled"

    @property
    def terminal(self) -> bool:
        return self not in (QueryStatus.SCHEDULED, QueryStatus.RUNNING)


class CheckStatus(str, Enum):
    """Check severities, ordered from healthy to unknown."""

    OK = "OK"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    UNKNOWN = "UNKNOWN"

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self]


_EXIT_CODES = {
    CheckStatus.OK: 0,
    CheckStatus.WARNING: 1,
    CheckStatus.CRITICAL: 2,
    CheckStatus.UNKNOWN: 3,
}


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """Half-open [start, end) query range in UTC, whole seconds."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError("window start must be < end")

    @property
    def start_epoch(self) -> int:
        return int(self.start.timestamp())

    @property
    def end_epoch(self) -> int:
        return int(self.end.timestamp())


# 9999-12-31T23:59:59Z, the last second datetime can represent.
MAX_CURSOR_EPOCH = 253402300799


class Cursor(BaseModel):
    """Persisted scan position: end of the last attempted window (unix seconds)."""

    model_config = ConfigDict(frozen=True)

    last_window_end: int = Field(ge=0, le=MAX_CURSOR_EPOCH)

    @classmethod
    def at(cls, when: datetime) -> Cursor:
        return cls(last_window_end=int(when.timestamp()))

    @property
    def end_time(self) -> datetime:
        return datetime.fromtimestamp(self.last_window_end, tz=UTC)


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Normalized view of one GetQueryResults response."""

    terminal: bool
    failure_reason: str | None = None
    matched_count: int = 0
    sample_messages: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Final severity and the human-readable status message."""

    status: CheckStatus
    message: str

    @classmethod
    def unknown(cls, message: str) -> CheckResult:
        return cls(status=CheckStatus.UNKNOWN, message=message)

    @property
    def exit_code(self) -> int:
        return self.status.exit_code
