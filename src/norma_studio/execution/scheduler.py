"""Delay-based rescheduling used by the run loop."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        """Run ``callback`` once after ``delay`` seconds."""
        ...


class AsyncioScheduler:
    """Schedules on an asyncio loop (the running one unless given)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        if delay <= 0:
            return self.loop.call_soon(callback)
        return self.loop.call_later(delay, callback)


__all__ = ["Cancellable", "Scheduler", "AsyncioScheduler"]
