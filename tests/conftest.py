from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from logs_insights_check.core.config import CheckConfig
from logs_insights_check.core.cursor_store import CursorStore
from logs_insights_check.core.models import TimeWindow

NOW = datetime(2025, 12, 30, 12, 0, 0, tzinfo=UTC)


def complete_output(count: float = 6, messages: Sequence[str] = ("omg something happened",)) -> dict[str, Any]:
    return {
        "status": "Complete",
        "results": [[{"field": "@message", "value": m}] for m in messages],
        "statistics": {"recordsMatched": count, "recordsScanned": 100.0, "bytesScanned": 1024.0},
    }


def running_output() -> dict[str, Any]:
    return {"status": "Running", "results": [], "statistics": {}}


class FakeQueryClient:
    """Scripted LogsQueryClient.

    ``responses`` items are returned by successive polls; an Exception item is
    raised instead. Once exhausted, polls keep returning Running, or block
    forever when ``hang`` is set.
    """

    def __init__(
        self,
        responses: Sequence[Any] = (),
        *,
        submit_error: Exception | None = None,
        cancel_error: Exception | None = None,
        hang: bool = False,
    ) -> None:
        self.responses = list(responses)
        self.submit_error = submit_error
        self.cancel_error = cancel_error
        self.hang = hang
        self.submitted: list[dict[str, Any]] = []
        self.polls = 0
        self.cancelled: list[str] = []
        self.polled = asyncio.Event()

    async def submit(
        self,
        window: TimeWindow,
        query: str,
        *,
        log_group_names: Sequence[str],
        limit: int,
    ) -> str:
        self.submitted.append(
            {
                "window": window,
                "query": query,
                "log_group_names": list(log_group_names),
                "limit": limit,
            }
        )
        if self.submit_error is not None:
            raise self.submit_error
        return "DUMMY-QUERY-ID"

    async def poll(self, handle: str) -> Mapping[str, Any]:
        self.polls += 1
        self.polled.set()
        if self.responses:
            item = self.responses.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        if self.hang:
            await asyncio.Event().wait()
        return running_output()

    async def cancel(self, handle: str) -> None:
        self.cancelled.append(handle)
        if self.cancel_error is not None:
            raise self.cancel_error


@pytest.fixture
def fake_client() -> Callable[..., FakeQueryClient]:
    return FakeQueryClient


@pytest.fixture
def check_config() -> CheckConfig:
    return CheckConfig(
        log_group_names=("/log/foo", "/log/baz"),
        query_filter="filter @message like /omg/",
        warning_over=2,
        critical_over=4,
        poll_interval=0.001,
    )


@pytest.fixture
def cursor_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "cursor.json"


@pytest.fixture
def store(cursor_path: Path) -> CursorStore:
    return CursorStore(cursor_path)
