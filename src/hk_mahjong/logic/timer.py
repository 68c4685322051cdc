"""
Schedulers for the coordinator's delayed continuations.

The coordinator never sleeps itself: pacing delays, the discard settle
pause and the human claim timeout are all handed to a Scheduler.
AsyncioScheduler runs them on the running event loop; ManualScheduler
keeps a virtual clock so tests and headless simulations can step time.
A continuation that raises is logged and does not stop later ones.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

logger = structlog.get_logger()

DEFAULT_MAX_STEPS = 100_000


class Scheduler(ABC):
    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        """Run `callback` once, `delay` seconds from now."""

    @abstractmethod
    def cancel_all(self) -> None:
        """Drop every continuation that has not run yet."""


def _run_guarded(callback: Callable[[], None]) -> None:
    try:
        callback()
    except Exception:
        logger.exception("timer callback failed")


class AsyncioScheduler(Scheduler):
    """Continuations as tasks on the running asyncio loop."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        task = asyncio.create_task(self._run_timer(delay, callback))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            if not task.done():
                task.cancel()
        self._tasks.clear()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait_idle(self, timeout: float | None = None) -> None:
        """Wait until no continuation is scheduled, including ones scheduled while waiting."""
        async with asyncio.timeout(timeout):
            while self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run_timer(self, seconds: float, callback: Callable[[], None]) -> None:
        try:
            await asyncio.sleep(seconds)
            _run_guarded(callback)
        except asyncio.CancelledError:
            pass


class ManualScheduler(Scheduler):
    """
    Virtual-clock scheduler.

    Nothing runs until advance() or run_until_idle() is called. Callbacks
    due at the same time run in the order they were scheduled.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, Callable[[], None]]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (self.now + max(delay, 0.0), next(self._counter), callback))

    def cancel_all(self) -> None:
        self._queue.clear()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running everything that falls due. Returns the number run."""
        deadline = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, callback = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            _run_guarded(callback)
            ran += 1
        self.now = deadline
        return ran

    def run_until_idle(self, max_steps: int = DEFAULT_MAX_STEPS) -> int:
        """Run continuations in due order until none remain."""
        ran = 0
        while self._queue:
            if ran >= max_steps:
                raise RuntimeError(f"scheduler still busy after {max_steps} steps")
            due, _, callback = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            _run_guarded(callback)
            ran += 1
        return ran
