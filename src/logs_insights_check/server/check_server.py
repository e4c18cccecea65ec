"""MCP server entrypoint (stdio transport).

Exposes the Logs Insights check as a tool, so an MCP client can run the same
cursor-continuing check the CLI runs.

Run locally (stdio):
    python -m logs_insights_check.server.check_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from logs_insights_check.tools.check import check_logs_insights_impl

LOGGER = logging.getLogger(__name__)
LOG_LEVEL_ENV = "LOGS_INSIGHTS_CHECK_LOG_LEVEL"


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("logs-insights-check", json_response=True)


@mcp.tool()
async def check_logs_insights(
    log_group_names: list[str],
    filter: str,
    warning_over: int = 0,
    critical_over: int = 0,
    return_messages: bool = False,
    state_dir: str | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """Count CloudWatch Logs Insights matches since the previous call and grade them.

    Parameters
    ----------
    log_group_names:
        One or more CloudWatch log group names to search.
    filter:
        Logs Insights query (e.g., "filter @message like /ERROR/").
    warning_over / critical_over:
        Thresholds; a count strictly greater than the threshold triggers it.
    return_messages:
        When true and the status is not OK, up to 10 matched messages are
        appended to the message, one per line.
    state_dir:
        Directory for the cursor file. Defaults to $LOGS_INSIGHTS_CHECK_STATE_DIR
        or a subdirectory of the system temp dir.
    timeout:
        Seconds to wait for the query before giving up with UNKNOWN.

    Returns
    -------
    dict:
        {"status": "OK"|"WARNING"|"CRITICAL"|"UNKNOWN", "exit_code": int, "message": str}
    """
    return await check_logs_insights_impl(
        log_group_names=log_group_names,
        filter=filter,
        warning_over=warning_over,
        critical_over=critical_over,
        return_messages=return_messages,
        state_dir=state_dir,
        timeout=timeout,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
