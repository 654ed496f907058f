"""Timer scheduling for the spin timeline."""
import asyncio
import heapq
import itertools
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    """A pending callback that can be cancelled."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Single-threaded one-shot timer source."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay seconds."""
        ...


class AsyncioScheduler:
    """
    Production scheduler backed by the running asyncio loop.

    The loop is looked up on every call so the scheduler can be created
    before the server starts its loop.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class ManualTimer:
    """Handle returned by ManualScheduler."""

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Test/Simulation scheduler with a virtual clock.

    Nothing runs until advance() is called. Callbacks due at the same time
    run in the order they were scheduled.
    """

    def __init__(self):
        self.now = 0.0
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + delay, callback)
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers still waiting to fire."""
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every timer that falls due."""
        deadline = self.now + seconds
        self._fire_until(deadline)
        self.now = deadline

    def run_until_idle(self, limit: float = 60.0) -> None:
        """Fire timers in order until none are pending or limit seconds pass."""
        self._fire_until(self.now + limit)

    def _fire_until(self, deadline: float) -> None:
        while self._queue and self._queue[0][0] <= deadline:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = when
            timer.callback()
