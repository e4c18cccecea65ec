"""MCP tool implementations.

Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from botocore.exceptions import BotoCoreError

from logs_insights_check.core.cancellation import CancelToken
from logs_insights_check.core.check import build_search, run_check
from logs_insights_check.core.client import LogsQueryClient
from logs_insights_check.core.config import CheckConfig, resolve_check_config
from logs_insights_check.core.models import CheckResult


def canonical_argv(config: CheckConfig) -> list[str]:
    """Return the long-form CLI arguments equivalent to ``config``.

    Used as the cursor identity for tool calls, so repeated calls with the
    same arguments continue the same scan.
    """
    argv: list[str] = []
    for name in config.log_group_names:
        argv += ["--log-group-name", name]
    argv += [
        "--filter",
        config.query_filter,
        "--warning-over",
        str(config.warning_over),
        "--critical-over",
        str(config.critical_over),
    ]
    if config.return_messages:
        argv.append("--return")
    return argv


def _result_to_dict(result: CheckResult) -> dict[str, Any]:
    return {
        "status": result.status.value,
        "exit_code": result.exit_code,
        "message": result.message,
    }


async def check_logs_insights_impl(
    *,
    log_group_names: Sequence[str],
    filter: str,
    warning_over: int = 0,
    critical_over: int = 0,
    return_messages: bool = False,
    state_dir: str | None = None,
    timeout: float | None = None,
    client: LogsQueryClient | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Implementation for the `check_logs_insights` MCP tool."""
    names = tuple(n.strip() for n in log_group_names if n and n.strip())
    if not names:
        raise ValueError("log_group_names must contain at least one log group name")
    if not filter.strip():
        raise ValueError("filter must not be empty")
    if timeout is not None and timeout <= 0:
        raise ValueError("timeout must be > 0")

    config = resolve_check_config(
        CheckConfig(
            log_group_names=names,
            query_filter=filter,
            warning_over=warning_over,
            critical_over=critical_over,
            return_messages=return_messages,
            state_dir=Path(state_dir).expanduser() if state_dir else None,
            timeout=timeout,
        )
    )
    try:
        search = build_search(config, canonical_argv(config), client=client)
    except BotoCoreError as e:
        return _result_to_dict(CheckResult.unknown(str(e)))

    result = await run_check(search, config, CancelToken(), now=now)
    return _result_to_dict(result)
