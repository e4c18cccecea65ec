from __future__ import annotations

from typing import Any

import pytest

from logs_insights_check.core.classifier import classify
from logs_insights_check.core.errors import MalformedResponseError
from logs_insights_check.core.models import QueryResult

SIMPLE_RESULTS = [
    [{"field": "@message", "value": "msg-1"}],
    [{"field": "@timestamp", "value": "2025-12-30 08:00:00.000"}, {"field": "@message", "value": "msg-2"}],
]


@pytest.mark.parametrize(
    ("raw", "want"),
    [
        (
            {"status": "Complete", "results": SIMPLE_RESULTS, "statistics": {"recordsMatched": 25.0}},
            QueryResult(terminal=True, matched_count=25, sample_messages=("msg-1", "msg-2")),
        ),
        (
            {"status": "Failed", "results": [], "statistics": {}},
            QueryResult(
                terminal=True,
                failure_reason="query was finished with `Failed` status",
                matched_count=0,
            ),
        ),
        (
            {"status": "Cancelled", "statistics": {"recordsMatched": 25.0}},
            QueryResult(
                terminal=True,
                failure_reason="query was finished with `Cancelled` status",
                matched_count=25,
            ),
        ),
        (
            {"status": "Running", "results": [], "statistics": None},
            QueryResult(terminal=False),
        ),
        (
            {"status": "Scheduled"},
            QueryResult(terminal=False),
        ),
    ],
    ids=["complete", "failed", "cancelled", "running", "scheduled"],
)
def test_classify(raw: dict[str, Any], want: QueryResult) -> None:
    assert classify(raw) == want


def test_classify_status_is_case_insensitive() -> None:
    res = classify({"status": "COMPLETE", "statistics": {"recordsMatched": 1.0}})
    assert res.terminal
    assert res.failure_reason is None
    assert res.matched_count == 1


def test_classify_missing_statistics_counts_zero() -> None:
    res = classify({"status": "Complete", "results": SIMPLE_RESULTS})
    assert res.matched_count == 0
    assert res.sample_messages == ("msg-1", "msg-2")


def test_classify_count_is_independent_of_rows() -> None:
    res = classify(
        {"status": "Complete", "results": SIMPLE_RESULTS[:1], "statistics": {"recordsMatched": 1234.0}}
    )
    assert res.matched_count == 1234
    assert len(res.sample_messages) == 1


def test_classify_skips_rows_without_message() -> None:
    rows = [
        [{"field": "@timestamp", "value": "t"}],
        [{"field": "@message"}],
        [{"field": "@message", "value": "kept"}, {"field": "@message", "value": "second"}],
    ]
    res = classify({"status": "Complete", "results": rows})
    assert res.sample_messages == ("kept",)


def test_classify_without_capture_drops_messages() -> None:
    res = classify(
        {"status": "Complete", "results": SIMPLE_RESULTS, "statistics": {"recordsMatched": 2.0}},
        capture_messages=False,
    )
    assert res.sample_messages == ()
    assert res.matched_count == 2


def test_classify_is_idempotent() -> None:
    raw = {"status": "Complete", "results": SIMPLE_RESULTS, "statistics": {"recordsMatched": 25.0}}
    assert classify(raw) == classify(raw)


def test_classify_ignores_response_metadata() -> None:
    raw = {
        "status": "Complete",
        "results": [],
        "statistics": {"recordsMatched": 3.0, "recordsScanned": 10.0},
        "encryptionKey": "arn:aws:kms:dummy",
        "ResponseMetadata": {"HTTPStatusCode": 200},
    }
    assert classify(raw).matched_count == 3


@pytest.mark.parametrize(
    "raw",
    [
        None,
        [],
        {},
        {"status": None},
        {"status": "Timeout"},
        {"status": "Exploded"},
        {"status": "Complete", "results": "nope"},
        {"status": "Complete", "statistics": {"recordsMatched": float("inf")}},
        {"status": "Complete", "statistics": {"recordsMatched": float("nan")}},
    ],
    ids=[
        "none", "list", "empty", "null-status", "timeout", "unknown", "bad-results",
        "inf-count", "nan-count",
    ],
)
def test_classify_malformed(raw: Any) -> None:
    with pytest.raises(MalformedResponseError):
        classify(raw)
