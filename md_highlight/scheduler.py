"""Debounced scheduling of highlight passes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class DebounceScheduler:
    """Run only the last of a burst of requests once the input goes quiet.

    Each `schedule` call cancels the armed timer and starts a new one on the
    running event loop. When the timer fires, the latest callback runs once
    and every waiter handed out since the previous fire is resolved with
    None, whether or not the callback succeeded. There is no maximum wait.

    Args:
        delay_ms: Idle time in milliseconds before the callback runs.
    """

    def __init__(self, delay_ms: float):
        self.delay_ms = delay_ms
        self.fire_count = 0
        self._handle: asyncio.TimerHandle | None = None
        self._waiters: list[asyncio.Future[None]] = []

    @property
    def pending(self) -> bool:
        """Whether a timer is armed."""
        return self._handle is not None

    def schedule(self, callback: Callable[[], None]) -> asyncio.Future[None]:
        """Arm (or re-arm) the timer for `callback`.

        Args:
            callback: Work to run when the timer fires.

        Returns:
            asyncio.Future[None]: Resolves after the coalesced callback ran.

        Raises:
            RuntimeError: If called without a running event loop.

        Examples:
            waiter = scheduler.schedule(lambda: engine.render(text))
            await waiter
        """
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()

        waiter = loop.create_future()
        self._waiters.append(waiter)
        self._handle = loop.call_later(self.delay_ms / 1000, self._fire, callback)
        return waiter

    def cancel(self) -> None:
        """Disarm the timer and release every waiter."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        waiters, self._waiters = self._waiters, []
        _release(waiters)

    def _fire(self, callback: Callable[[], None]) -> None:
        self._handle = None
        self.fire_count += 1
        waiters, self._waiters = self._waiters, []
        try:
            callback()
        except Exception:
            logger.exception("Debounced highlight pass failed")
        finally:
            _release(waiters)


def _release(waiters: list[asyncio.Future[None]]) -> None:
    for waiter in waiters:
        if not waiter.done():
            waiter.set_result(None)
