"""Repeating timers that drive the tick loop.

Both timers share one contract: ``start`` is a no-op while running,
``stop`` is safe to call any number of times, and an exception raised by
the callback is logged without ending the loop.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol

import structlog

logger = structlog.get_logger()

TickCallback = Callable[[], None]


class Timer(Protocol):
    @property
    def running(self) -> bool: ...

    def start(self, callback: TickCallback) -> None: ...

    def stop(self) -> None: ...


class RepeatingTimer:
    """Calls the callback every *period* seconds from an asyncio task.

    Must be started from inside a running event loop.
    """

    def __init__(self, period: float = 1.0) -> None:
        if period <= 0:
            raise ValueError("period must be positive")
        self.period = period
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, callback: TickCallback) -> None:
        if self.running:
            logger.warning("timer already running, start ignored")
            return
        self._task = asyncio.get_running_loop().create_task(self._run(callback))

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self, callback: TickCallback) -> None:
        try:
            while True:
                await asyncio.sleep(self.period)
                try:
                    callback()
                except Exception:
                    logger.exception("tick callback failed")
        except asyncio.CancelledError:
            pass


class SteppedTimer:
    """A timer advanced explicitly with :meth:`fire`.

    Used for fast-forwarded headless runs, where ticks should not wait on
    the wall clock.
    """

    def __init__(self) -> None:
        self._callback: TickCallback | None = None
        self.starts = 0

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        if self.running:
            logger.warning("timer already running, start ignored")
            return
        self._callback = callback
        self.starts += 1

    def stop(self) -> None:
        self._callback = None

    def fire(self, times: int = 1) -> int:
        """Run up to *times* callbacks; stops early if the timer is stopped.

        Returns the number of callbacks that ran.
        """
        fired = 0
        for _ in range(times):
            callback = self._callback
            if callback is None:
                break
            try:
                callback()
            except Exception:
                logger.exception("tick callback failed")
            fired += 1
        return fired
