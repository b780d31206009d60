"""Timer schedulers that drive the stroke animator.

The animator never sleeps. It asks a scheduler to call it back later,
which keeps every suspension point explicit and lets the same state
machine run on an asyncio event loop or on a virtual clock.

Two implementations:
    AsyncioScheduler: Real time, backed by ``loop.call_later``.
    ManualScheduler: Virtual clock advanced explicitly. Used for tests and
        for rendering frames offline.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Minimal timer interface used by StrokeAnimator."""

    def now_ms(self) -> float: ...

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    The loop is looked up lazily so the scheduler can be created outside
    a running loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(delay_ms, 0.0) / 1000.0, callback)


class _ManualTimer:
    __slots__ = ('due', 'callback', 'cancelled')

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-clock scheduler.

    Time only moves when advance() or advance_to() is called; due
    callbacks run in due-time order (ties in scheduling order) with the
    clock set to their due time.

    Example:
        >>> sched = ManualScheduler()
        >>> fired = []
        >>> _ = sched.call_later(100, lambda: fired.append(sched.now_ms()))
        >>> sched.advance(250)
        >>> fired
        [100.0]
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)
        self._queue: list[tuple[float, int, _ManualTimer]] = []
        self._seq = itertools.count()

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self._now + max(delay_ms, 0.0), callback)
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers scheduled and not cancelled."""
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance_to(self, when_ms: float) -> None:
        """Run every timer due at or before ``when_ms`` and set the clock there."""
        while self._queue and self._queue[0][0] <= when_ms:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = max(self._now, due)
            timer.callback()
        self._now = max(self._now, float(when_ms))

    def advance(self, delta_ms: float) -> None:
        self.advance_to(self._now + delta_ms)

    def run_until_idle(self, limit: int = 10_000) -> None:
        """Run timers until none are pending."""
        for _ in range(limit):
            live = [entry for entry in self._queue if not entry[2].cancelled]
            if not live:
                self._queue.clear()
                return
            self.advance_to(min(entry[0] for entry in live))
        logger.warning("run_until_idle stopped after %d steps", limit)
