# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Schedulers for deferred callbacks.

A scheduler exposes ``call_later(delay, callback)`` and returns a handle
with ``cancel()``. Two implementations are provided:

- AsyncioScheduler: delegates to the running asyncio event loop.
- ManualScheduler: a host-driven clock, advanced explicitly. Useful for UI
  toolkits with their own main loop and for tests.

Example:
    >>> scheduler = ManualScheduler()
    >>> fired = []
    >>> handle = scheduler.call_later(0.4, lambda: fired.append(True))
    >>> scheduler.advance(0.3)
    >>> fired
    []
    >>> scheduler.advance(0.1)
    >>> fired
    [True]
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable


class AsyncioScheduler:
    """Schedule callbacks on an asyncio event loop.

    Args:
        loop: Loop to use. If None, the running loop at call time is used.
    """

    __slots__ = ('_loop',)

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        """Schedule ``callback`` after ``delay`` seconds.

        Raises:
            RuntimeError: If no loop was given and none is running.
        """
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class ManualTimer:
    """Handle returned by ManualScheduler.call_later."""

    __slots__ = ('when', 'callback', 'cancelled')

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def __repr__(self) -> str:
        state = 'cancelled' if self.cancelled else 'pending'
        return f"ManualTimer(when={self.when!r}, {state})"

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """A scheduler whose clock only moves when advance() is called."""

    __slots__ = ('now', '_queue', '_counter')

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        """Return the number of pending (not cancelled) timers."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + delay, callback)
        heapq.heappush(self._queue, (timer.when, next(self._counter), timer))
        return timer

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            self.now = when
            if not timer.cancelled:
                timer.callback()
        self.now = target
