"""Cooperative cancellation.

The poll loop watches a CancelToken at each suspension point and runs its
own cleanup. A second interrupt gives up on that cleanup.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Awaitable, Iterable
from typing import TypeVar

from .errors import CancellationError
from .models import CheckResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class CancelToken:
    """One-shot cancellation flag carrying the first reason given."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    def cancel(self, reason: str = "execution cancelled") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


async def until_cancelled(aw: Awaitable[T], token: CancelToken) -> T:
    """Await ``aw`` unless the token fires first.

    If the token wins, ``aw`` is cancelled and CancellationError is raised.
    A result that is already available wins over a concurrent cancel.
    """
    if token.cancelled:
        if asyncio.iscoroutine(aw):
            aw.close()
        raise CancellationError(token.reason or "execution cancelled")

    task = asyncio.ensure_future(aw)
    waiter = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise CancellationError(token.reason or "execution cancelled")


class SignalCoordinator:
    """Turns process signals into token cancellation, and a second one into a forced exit."""

    def __init__(self, token: CancelToken, *, logger: logging.Logger = logger) -> None:
        self.token = token
        self.forced = asyncio.Event()
        self._received = 0
        self._logger = logger
        self._installed: list[signal.Signals] = []

    def on_signal(self, name: str = "signal") -> None:
        self._received += 1
        if self._received == 1:
            self._logger.info("received %s, cancelling the running query", name)
            self.token.cancel(f"terminated by {name}")
            return
        self._logger.error("received %s again, forcing shutdown", name)
        self.forced.set()

    def install(
        self,
        loop: asyncio.AbstractEventLoop,
        signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
    ) -> None:
        for sig in signals:
            loop.add_signal_handler(sig, self.on_signal, sig.name)
            self._installed.append(sig)

    def uninstall(self, loop: asyncio.AbstractEventLoop) -> None:
        while self._installed:
            loop.remove_signal_handler(self._installed.pop())

    async def supervise(self, check: Awaitable[CheckResult]) -> CheckResult:
        """Return the check's result, or UNKNOWN if forced out first."""
        task = asyncio.ensure_future(check)
        forced = asyncio.ensure_future(self.forced.wait())
        try:
            done, _ = await asyncio.wait({task, forced}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            forced.cancel()

        if task in done:
            return task.result()
        task.cancel()
        return CheckResult.unknown("terminated by signal")
