"""Query-poll loop.

Submits one Logs Insights query for the planned window, polls it at a fixed
interval until it reaches a terminal state, and records the window end as the
new cursor. Once a query has been submitted, the cursor is written on every
exit path, so a window that keeps failing is not retried forever.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from .cancellation import CancelToken, until_cancelled
from .classifier import classify
from .client import LogsQueryClient
from .config import CheckConfig
from .cursor_store import CursorStore
from .errors import (
    CancellationError,
    CursorPersistError,
    MalformedResponseError,
    QueryCancelError,
    RemoteFailure,
    TransientPollError,
)
from .models import Cursor, QueryResult
from .time_window import plan_window

logger = logging.getLogger(__name__)


class InsightsSearch:
    def __init__(
        self,
        client: LogsQueryClient,
        store: CursorStore,
        config: CheckConfig,
        *,
        logger: logging.Logger = logger,
    ) -> None:
        self.client = client
        self.store = store
        self.config = config
        self._logger = logger

    async def run(self, cancel: CancelToken, now: datetime, interval: float) -> QueryResult:
        """Run one query to completion.

        Raises SubmissionError, RemoteFailure, CursorPersistError,
        CursorStoreError or CancellationError.
        """
        cfg = self.config
        prior = await self.store.load()
        window = plan_window(
            now,
            prior,
            lag=cfg.ingestion_lag,
            min_window=cfg.min_window,
            max_backfill=cfg.max_backfill,
            logger=self._logger,
        )
        next_cursor = Cursor.at(window.end)
        self._logger.debug(
            "querying window [%s, %s)", window.start.isoformat(), window.end.isoformat()
        )

        # Nothing has been attempted until the query is accepted, so neither a
        # submission error nor an interrupt here touches the cursor.
        handle = await until_cancelled(
            self.client.submit(
                window,
                cfg.full_query(),
                log_group_names=cfg.log_group_names,
                limit=cfg.result_limit,
            ),
            cancel,
        )
        self._logger.debug("started query %s", handle)

        try:
            res = await self._wait_for_terminal(handle, cancel, interval)
        except CancellationError:
            self._logger.info("execution cancelled, stopping query %s", handle)
            await self._abandon(next_cursor, handle)
            raise
        except asyncio.CancelledError:
            # The owning task was cancelled (e.g. an MCP request was aborted).
            self._logger.info("task cancelled, stopping query %s", handle)
            await asyncio.shield(self._abandon(next_cursor, handle))
            raise

        if res.failure_reason:
            await self._save_best_effort(next_cursor)
            raise RemoteFailure(res.failure_reason, res)

        try:
            await self.store.save(next_cursor)
        except OSError as exc:
            raise CursorPersistError(f"failed to save cursor file: {exc}") from exc
        return res

    async def _wait_for_terminal(
        self, handle: str, cancel: CancelToken, interval: float
    ) -> QueryResult:
        while True:
            await until_cancelled(asyncio.sleep(interval), cancel)

            self._logger.debug("polling query %s", handle)
            try:
                raw = await until_cancelled(self.client.poll(handle), cancel)
            except TransientPollError as exc:
                self._logger.warning("GetQueryResults failed (will retry): %s", exc)
                continue

            try:
                res = classify(raw, capture_messages=self.config.return_messages)
            except MalformedResponseError as exc:
                self._logger.warning("failed to parse GetQueryResults response (will retry): %s", exc)
                continue

            if not res.terminal:
                self._logger.debug("query %s not finished yet", handle)
                continue

            self._logger.debug("query %s finished: %s", handle, res)
            return res

    async def _abandon(self, cursor: Cursor, handle: str) -> None:
        await self._save_best_effort(cursor)
        await self._stop_best_effort(handle)

    async def _save_best_effort(self, cursor: Cursor) -> None:
        try:
            await self.store.save(cursor)
        except OSError as exc:
            self._logger.error("failed to save cursor file: %s", exc)

    async def _stop_best_effort(self, handle: str) -> None:
        try:
            await self.client.cancel(handle)
        except QueryCancelError as exc:
            self._logger.error("failed to stop the running query: %s", exc)
        else:
            self._logger.debug("stopped query %s", handle)
