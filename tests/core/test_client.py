from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime

import boto3
import pytest
from botocore.stub import Stubber

from logs_insights_check.core.client import CloudWatchLogsInsightsClient
from logs_insights_check.core.errors import QueryCancelError, SubmissionError, TransientPollError
from logs_insights_check.core.models import TimeWindow

WINDOW = TimeWindow(
    start=datetime(2025, 12, 30, 11, 54, 0, tzinfo=UTC),
    end=datetime(2025, 12, 30, 11, 55, 0, tzinfo=UTC),
)


@pytest.fixture
def logs_client():
    return boto3.client(
        "logs",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(logs_client) -> Iterator[Stubber]:
    with Stubber(logs_client) as s:
        yield s
        s.assert_no_pending_responses()


@pytest.mark.asyncio
async def test_submit_sends_window_and_query(logs_client, stubber: Stubber) -> None:
    stubber.add_response(
        "start_query",
        {"queryId": "DUMMY-QUERY-ID"},
        {
            "logGroupNames": ["/log/foo", "/log/baz"],
            "startTime": WINDOW.start_epoch,
            "endTime": WINDOW.end_epoch,
            "queryString": "filter @message like /omg/",
            "limit": 10,
        },
    )
    client = CloudWatchLogsInsightsClient(logs_client)

    handle = await client.submit(
        WINDOW,
        "filter @message like /omg/",
        log_group_names=("/log/foo", "/log/baz"),
        limit=10,
    )

    assert handle == "DUMMY-QUERY-ID"


@pytest.mark.asyncio
async def test_submit_error(logs_client, stubber: Stubber) -> None:
    stubber.add_client_error("start_query", service_error_code="MalformedQueryException")
    client = CloudWatchLogsInsightsClient(logs_client)

    with pytest.raises(SubmissionError, match="MalformedQueryException"):
        await client.submit(WINDOW, "bad |", log_group_names=["/log/foo"], limit=10)


@pytest.mark.asyncio
async def test_poll_returns_raw_payload(logs_client, stubber: Stubber) -> None:
    stubber.add_response(
        "get_query_results",
        {
            "status": "Complete",
            "results": [[{"field": "@message", "value": "omg something happened"}]],
            "statistics": {"recordsMatched": 6.0, "recordsScanned": 10.0, "bytesScanned": 100.0},
        },
        {"queryId": "DUMMY-QUERY-ID"},
    )
    client = CloudWatchLogsInsightsClient(logs_client)

    raw = await client.poll("DUMMY-QUERY-ID")

    assert raw["status"] == "Complete"
    assert raw["statistics"]["recordsMatched"] == 6.0


@pytest.mark.asyncio
async def test_poll_error_is_transient(logs_client, stubber: Stubber) -> None:
    stubber.add_client_error("get_query_results", service_error_code="ThrottlingException")
    client = CloudWatchLogsInsightsClient(logs_client)

    with pytest.raises(TransientPollError):
        await client.poll("DUMMY-QUERY-ID")


@pytest.mark.asyncio
async def test_cancel_stops_query(logs_client, stubber: Stubber) -> None:
    stubber.add_response("stop_query", {"success": True}, {"queryId": "DUMMY-QUERY-ID"})
    await CloudWatchLogsInsightsClient(logs_client).cancel("DUMMY-QUERY-ID")


@pytest.mark.asyncio
async def test_cancel_error(logs_client, stubber: Stubber) -> None:
    stubber.add_client_error("stop_query", service_error_code="InvalidParameterException")
    with pytest.raises(QueryCancelError):
        await CloudWatchLogsInsightsClient(logs_client).cancel("DUMMY-QUERY-ID")
