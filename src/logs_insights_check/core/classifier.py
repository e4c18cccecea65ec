"""GetQueryResults classification."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import MalformedResponseError
from .models import QueryResult, QueryStatus

MESSAGE_FIELD = "@message"

_STATUS_BY_NAME = {s.value.lower(): s for s in QueryStatus}


class ResultField(BaseModel):
    model_config = ConfigDict(extra="ignore")

    field: str | None = None
    value: str | None = None


class QueryStatistics(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    records_matched: float = Field(default=0.0, alias="recordsMatched", allow_inf_nan=False)


class QueryResultsPayload(BaseModel):
    """The subset of a GetQueryResults response the check relies on."""

    model_config = ConfigDict(extra="ignore")

    status: str
    results: list[list[ResultField]] = Field(default_factory=list)
    statistics: QueryStatistics | None = None


def _parse_status(raw_status: str) -> QueryStatus:
    status = _STATUS_BY_NAME.get(raw_status.strip().lower())
    if status is None:
        raise MalformedResponseError(f"unexpected query status: {raw_status!r}")
    return status


def _messages(rows: list[list[ResultField]]) -> tuple[str, ...]:
    out: list[str] = []
    for row in rows:
        for f in row:
            if f.field == MESSAGE_FIELD and f.value is not None:
                out.append(f.value)
                break
    return tuple(out)


def classify(raw: Mapping[str, Any] | None, *, capture_messages: bool = True) -> QueryResult:
    """Map a raw GetQueryResults response to a QueryResult.

    Raises MalformedResponseError for payloads without a recognizable status;
    callers treat that as retryable.
    """
    if not isinstance(raw, Mapping):
        raise MalformedResponseError(f"unexpected response: {raw!r}")
    try:
        payload = QueryResultsPayload.model_validate(raw)
    except ValidationError as exc:
        raise MalformedResponseError(f"unexpected response: {exc}") from exc

    status = _parse_status(payload.status)
    matched = int(payload.statistics.records_matched) if payload.statistics else 0

    if not status.terminal:
        return QueryResult(terminal=False, matched_count=matched)

    failure_reason = None
    if status is not QueryStatus.COMPLETE:
        failure_reason = f"query was finished with `{status.value}` status"

    return QueryResult(
        terminal=True,
        failure_reason=failure_reason,
        matched_count=matched,
        sample_messages=_messages(payload.results) if capture_messages else (),
    )
