"""Check configuration and environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path

POLL_INTERVAL_ENV = "LOGS_INSIGHTS_CHECK_POLL_INTERVAL"
TIMEOUT_ENV = "LOGS_INSIGHTS_CHECK_TIMEOUT"

# GetQueryResults returns @message (plus @timestamp and @ptr) by default; the
# explicit projection keeps the output stable when the filter uses `stats`.
MESSAGE_PROJECTION = " | fields @message"


@dataclass(frozen=True, slots=True)
class CheckConfig:
    log_group_names: tuple[str, ...]
    query_filter: str

    warning_over: int = 0
    critical_over: int = 0
    return_messages: bool = False
    state_dir: Path | None = None

    # Logs Insights needs a few minutes before recent events are queryable.
    ingestion_lag: timedelta = field(default=timedelta(minutes=5))
    min_window: timedelta = field(default=timedelta(minutes=1))
    max_backfill: timedelta = field(default=timedelta(minutes=90))

    poll_interval: float = 1.0
    result_limit: int = 10
    timeout: float | None = None

    def full_query(self) -> str:
        """Return the filter with the message projection when capture is on."""
        if self.return_messages:
            return self.query_filter + MESSAGE_PROJECTION
        return self.query_filter


def _positive_float_env(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number") from exc
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
    return value


def resolve_check_config(cfg: CheckConfig) -> CheckConfig:
    """Return config with optional env overrides applied."""
    interval = _positive_float_env(POLL_INTERVAL_ENV)
    if interval is not None and interval != cfg.poll_interval:
        cfg = replace(cfg, poll_interval=interval)

    # An explicit timeout (flag or tool argument) wins over the environment.
    if cfg.timeout is None:
        timeout = _positive_float_env(TIMEOUT_ENV)
        if timeout is not None:
            cfg = replace(cfg, timeout=timeout)
    return cfg
