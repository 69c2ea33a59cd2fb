"""Recurring-callback schedulers driving the engine loop.

The engine re-arms one callback per frame; it never owns a thread.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Callable, List, Optional, Protocol


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle: ...


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop (the running one by default)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class _ManualHandle:
    def __init__(self, when: float, order: int, callback: Callable[[], None]):
        self.when = when
        self.order = order
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Runs callbacks only when asked to, on a virtual clock."""

    def __init__(self) -> None:
        self.time = 0.0
        self._pending: List[_ManualHandle] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self.time + max(delay, 0.0), next(self._counter), callback)
        self._pending.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self._pending if not h.cancelled)

    def run_once(self) -> bool:
        """Run the earliest pending callback. Returns False when nothing was pending."""
        self._pending = [h for h in self._pending if not h.cancelled]
        if not self._pending:
            return False
        handle = min(self._pending, key=lambda h: (h.when, h.order))
        self._pending.remove(handle)
        self.time = max(self.time, handle.when)
        handle.callback()
        return True

    def run(self, max_callbacks: int) -> int:
        ran = 0
        while ran < max_callbacks and self.run_once():
            ran += 1
        return ran
