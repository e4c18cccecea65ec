"""One complete check invocation: search, then thresholds."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime

from .cancellation import CancelToken
from .client import CloudWatchLogsInsightsClient, LogsQueryClient
from .config import CheckConfig
from .cursor_store import CursorStore, default_state_dir, state_file_path
from .errors import LogsInsightsCheckError
from .models import CheckResult
from .search import InsightsSearch
from .thresholds import evaluate

logger = logging.getLogger(__name__)


def build_search(
    config: CheckConfig,
    argv: Sequence[str],
    *,
    client: LogsQueryClient | None = None,
    env: Mapping[str, str] | None = None,
) -> InsightsSearch:
    """Wire the client and the cursor store keyed by ``argv``.

    Without an explicit client, one is built from the ambient AWS
    configuration; botocore errors (missing region, bad profile) propagate.
    """
    if client is None:
        client = CloudWatchLogsInsightsClient.from_environment()
    state_dir = config.state_dir or default_state_dir()
    store = CursorStore(state_file_path(state_dir, argv, env=env))
    logger.debug("using cursor file %s", store.path)
    return InsightsSearch(client, store, config)


async def run_check(
    search: InsightsSearch,
    config: CheckConfig,
    cancel: CancelToken,
    *,
    now: datetime | None = None,
) -> CheckResult:
    """Run the search and evaluate it; every error becomes UNKNOWN."""
    if now is None:
        now = datetime.now(UTC)

    deadline = None
    if config.timeout is not None:
        loop = asyncio.get_running_loop()
        deadline = loop.call_later(
            config.timeout,
            cancel.cancel,
            f"query did not finish within {config.timeout:g}s",
        )

    try:
        res = await search.run(cancel, now, config.poll_interval)
    except LogsInsightsCheckError as exc:
        logger.debug("check failed: %r", exc)
        return CheckResult.unknown(str(exc))
    finally:
        if deadline is not None:
            deadline.cancel()

    return evaluate(
        res.matched_count,
        config.warning_over,
        config.critical_over,
        messages=res.sample_messages,
        include_messages=config.return_messages,
    )
