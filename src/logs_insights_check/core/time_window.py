"""Query window planning.

Consecutive invocations scan the log stream back to back: each window starts
where the previous one ended, as long as the previous end is recent enough.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from .models import Cursor, TimeWindow

logger = logging.getLogger(__name__)


def _to_utc_seconds(dt: datetime) -> datetime:
    """Normalize to timezone-aware UTC, dropping sub-second precision."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).replace(microsecond=0)


def plan_window(
    now: datetime,
    prior: Cursor | None,
    *,
    lag: timedelta,
    min_window: timedelta,
    max_backfill: timedelta,
    logger: logging.Logger = logger,
) -> TimeWindow:
    """Return the next [start, end) window.

    ``end`` trails ``now`` by ``lag``. ``start`` continues from the prior
    cursor when it is within ``max_backfill`` of ``end``; otherwise the window
    falls back to ``min_window`` before ``end``.
    """
    end = _to_utc_seconds(now - lag)
    fallback = TimeWindow(start=end - min_window, end=end)

    if prior is None:
        return fallback

    last_end = prior.end_time
    if last_end >= end:
        logger.warning(
            "ignoring cursor at %s: not before window end %s",
            last_end.isoformat(),
            end.isoformat(),
        )
        return fallback
    if end - last_end > max_backfill:
        logger.warning(
            "ignoring cursor at %s: older than %s before window end",
            last_end.isoformat(),
            max_backfill,
        )
        return fallback

    return TimeWindow(start=last_end, end=end)
