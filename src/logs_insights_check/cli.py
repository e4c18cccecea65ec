from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn

from botocore.exceptions import BotoCoreError

from logs_insights_check.core.cancellation import CancelToken, SignalCoordinator
from logs_insights_check.core.check import build_search, run_check
from logs_insights_check.core.config import CheckConfig, resolve_check_config
from logs_insights_check.core.models import CheckResult

CHECK_NAME = "CloudWatch Logs Insights"
LOG_LEVEL_ENV = "LOGS_INSIGHTS_CHECK_LOG_LEVEL"

LOGGER = logging.getLogger(__name__)


def _configure_logging(*, debug: bool) -> None:
    """Log to stderr; stdout is reserved for the status line."""
    if debug:
        level = logging.DEBUG
    else:
        level_name = os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
        level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _positive_float(s: str) -> float:
    try:
        value = float(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not a number: {s!r}") from e
    if value <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return value


class _CheckArgumentParser(argparse.ArgumentParser):
    """Usage errors end as UNKNOWN; argparse's own exit code 2 would read as CRITICAL."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        result = CheckResult.unknown(message)
        print(format_result(result))
        self.exit(result.exit_code)


def build_parser() -> argparse.ArgumentParser:
    p = _CheckArgumentParser(
        prog="logs-insights-check",
        description="Check CloudWatch Logs Insights matches since the previous run.",
    )
    p.add_argument(
        "--log-group-name",
        dest="log_group_names",
        action="append",
        required=True,
        metavar="LOG-GROUP-NAME",
        help="Log group name (repeatable)",
    )
    p.add_argument(
        "-f",
        "--filter",
        required=True,
        help="Filter expression to search logs via CloudWatch Logs Insights",
    )
    p.add_argument("-w", "--warning-over", type=int, default=0, metavar="WARNING",
                   help="Trigger a warning if matched lines is over a number")
    p.add_argument("-c", "--critical-over", type=int, default=0, metavar="CRITICAL",
                   help="Trigger a critical if matched lines is over a number")
    p.add_argument("-s", "--state-dir", default=None, metavar="DIR",
                   help="Dir to keep state files under")
    p.add_argument("-r", "--return", dest="return_messages", action="store_true",
                   help="Output matched log messages (up to 10 messages)")
    p.add_argument("--timeout", type=_positive_float, default=None, metavar="SECONDS",
                   help="Give up (UNKNOWN) if the query has not finished after this long")
    p.add_argument("--debug", action="store_true", help="Enable debug log")
    return p


def config_from_args(args: argparse.Namespace) -> CheckConfig:
    return CheckConfig(
        log_group_names=tuple(args.log_group_names),
        query_filter=args.filter,
        warning_over=args.warning_over,
        critical_over=args.critical_over,
        return_messages=args.return_messages,
        state_dir=Path(args.state_dir) if args.state_dir else None,
        timeout=args.timeout,
    )


def format_result(result: CheckResult) -> str:
    return f"{CHECK_NAME} {result.status.value}: {result.message}"


def _exit_now(result: CheckResult) -> NoReturn:
    """Report and leave without joining worker threads still blocked in boto3."""
    print(format_result(result), flush=True)
    sys.stderr.flush()
    os._exit(result.exit_code)


async def _run(config: CheckConfig, argv: Sequence[str]) -> CheckResult:
    try:
        search = build_search(config, argv)
    except BotoCoreError as e:
        return CheckResult.unknown(str(e))

    cancel = CancelToken()
    coordinator = SignalCoordinator(cancel)
    loop = asyncio.get_running_loop()
    coordinator.install(loop)
    try:
        result = await coordinator.supervise(run_check(search, config, cancel))
    finally:
        coordinator.uninstall(loop)

    if coordinator.forced.is_set():
        _exit_now(result)
    return result


def main(argv: Sequence[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    args = build_parser().parse_args(argv)
    _configure_logging(debug=args.debug)

    try:
        config = resolve_check_config(config_from_args(args))
    except ValueError as e:
        result = CheckResult.unknown(str(e))
    else:
        result = asyncio.run(_run(config, argv))

    print(format_result(result))
    raise SystemExit(result.exit_code)


if __name__ == "__main__":
    main()
