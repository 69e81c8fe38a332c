"""Cooperative timers for the movement and wall-shift pipelines.

Both pipelines run on a single thread; a callback is the only thing that
advances their state. :class:`ManualScheduler` drives them from an explicit
virtual clock (tests, headless simulation), :class:`AsyncioScheduler` from a
running event loop. Delays are in milliseconds.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

Callback = Callable[[], None]


class TimerHandle:
    """Cancellable reference to a pending callback."""

    def __init__(self, when: float, callback: Callback) -> None:
        self.when = when
        self._callback = callback
        self._cancelled = False
        self._inner: Optional[asyncio.TimerHandle] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._inner is not None:
            self._inner.cancel()

    def _run(self) -> None:
        if not self._cancelled:
            self._cancelled = True
            self._callback()


class AbstractScheduler(ABC):
    @abstractmethod
    def now(self) -> float:
        """Current time in milliseconds."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        """Run ``callback`` once ``delay`` milliseconds have elapsed."""


class ManualScheduler(AbstractScheduler):
    """Virtual clock that only moves when :meth:`advance` is called."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        self._prune()
        handle = TimerHandle(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    def _prune(self) -> None:
        """Drop cancelled handles so start/stop cycles do not pile up."""

        live = [entry for entry in self._queue if not entry[2].cancelled]
        if len(live) != len(self._queue):
            heapq.heapify(live)
            self._queue = live

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, delay: float) -> None:
        """Move the clock forward, firing due callbacks in time order.

        Callbacks scheduled while advancing fire within the same call when
        they fall due before the target time.
        """

        target = self._now + delay
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            self._now = max(self._now, when)
            handle._run()
        self._now = target

    def run_pending(self) -> None:
        """Fire everything already due without moving the clock."""

        self.advance(0.0)


class AsyncioScheduler(AbstractScheduler):
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._loop.time() * 1000.0

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(self.now() + delay, callback)
        handle._inner = self._loop.call_later(max(0.0, delay) / 1000.0, handle._run)
        return handle


__all__ = ["TimerHandle", "AbstractScheduler", "ManualScheduler", "AsyncioScheduler"]
