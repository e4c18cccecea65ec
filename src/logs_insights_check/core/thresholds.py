"""Threshold evaluation."""

from __future__ import annotations

from collections.abc import Sequence

from .models import CheckResult, CheckStatus


def evaluate(
    matched_count: int,
    warning_over: int,
    critical_over: int,
    *,
    messages: Sequence[str] = (),
    include_messages: bool = False,
) -> CheckResult:
    """Map a matched-record count to a severity.

    Thresholds are exclusive: a count equal to a threshold does not trigger it.
    """
    if matched_count > critical_over:
        status = CheckStatus.CRITICAL
        msg = f"{matched_count} > {critical_over} messages"
    elif matched_count > warning_over:
        status = CheckStatus.WARNING
        msg = f"{matched_count} > {warning_over} messages"
    else:
        status = CheckStatus.OK
        msg = f"{matched_count} messages"

    if status is not CheckStatus.OK and include_messages:
        msg = "\n".join([msg, *messages])
    return CheckResult(status=status, message=msg)
