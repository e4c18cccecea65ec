"""Check core: window planning, query polling, cursor state and thresholds."""

from __future__ import annotations

from .cancellation import CancelToken, SignalCoordinator
from .check import build_search, run_check
from .classifier import classify
from .client import CloudWatchLogsInsightsClient, LogsQueryClient
from .config import CheckConfig, resolve_check_config
from .cursor_store import CursorStore, default_state_dir, state_file_path
from .models import CheckResult, CheckStatus, Cursor, QueryResult, QueryStatus, TimeWindow
from .search import InsightsSearch
from .thresholds import evaluate
from .time_window import plan_window

__all__ = [
    "CancelToken",
    "CheckConfig",
    "CheckResult",
    "CheckStatus",
    "CloudWatchLogsInsightsClient",
    "Cursor",
    "CursorStore",
    "InsightsSearch",
    "LogsQueryClient",
    "QueryResult",
    "QueryStatus",
    "SignalCoordinator",
    "TimeWindow",
    "build_search",
    "classify",
    "default_state_dir",
    "evaluate",
    "plan_window",
    "resolve_check_config",
    "run_check",
    "state_file_path",
]
