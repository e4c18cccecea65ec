"""Remote query client interface and its CloudWatch Logs implementation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import QueryCancelError, SubmissionError, TransientPollError
from .models import TimeWindow

logger = logging.getLogger(__name__)


class LogsQueryClient(Protocol):
    """Submit / poll / cancel a log-search query."""

    async def submit(
        self,
        window: TimeWindow,
        query: str,
        *,
        log_group_names: Sequence[str],
        limit: int,
    ) -> str:
        """Start a query and return its handle. Raises SubmissionError."""
        ...

    async def poll(self, handle: str) -> Mapping[str, Any]:
        """Return the raw status payload. Raises TransientPollError."""
        ...

    async def cancel(self, handle: str) -> None:
        """Best-effort stop. Raises QueryCancelError."""
        ...


class CloudWatchLogsInsightsClient:
    """LogsQueryClient backed by a boto3 ``logs`` client.

    boto3 is blocking, so every call runs in a worker thread.
    """

    def __init__(self, client: Any, *, logger: logging.Logger = logger) -> None:
        self._client = client
        self._logger = logger

    @classmethod
    def from_environment(cls, *, region_name: str | None = None) -> CloudWatchLogsInsightsClient:
        """Build from the ambient AWS credential chain and region."""
        return cls(boto3.client("logs", region_name=region_name))

    async def submit(
        self,
        window: TimeWindow,
        query: str,
        *,
        log_group_names: Sequence[str],
        limit: int,
    ) -> str:
        params = {
            "logGroupNames": list(log_group_names),
            "startTime": window.start_epoch,
            "endTime": window.end_epoch,
            "queryString": query,
            "limit": limit,
        }
        self._logger.debug("start query: %s", params)
        try:
            out = await asyncio.to_thread(self._client.start_query, **params)
        except (BotoCoreError, ClientError) as exc:
            raise SubmissionError(f"failed to start query: {exc}") from exc

        query_id = out.get("queryId")
        if not query_id:
            raise SubmissionError(f"failed to start query: no queryId in response {out!r}")
        return query_id

    async def poll(self, handle: str) -> Mapping[str, Any]:
        try:
            return await asyncio.to_thread(self._client.get_query_results, queryId=handle)
        except (BotoCoreError, ClientError) as exc:
            raise TransientPollError(f"GetQueryResults failed: {exc}") from exc

    async def cancel(self, handle: str) -> None:
        try:
            await asyncio.to_thread(self._client.stop_query, queryId=handle)
        except (BotoCoreError, ClientError) as exc:
            raise QueryCancelError(f"StopQuery failed: {exc}") from exc
