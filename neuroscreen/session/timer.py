# neuroscreen/session/timer.py
"""
Countdown timers for timed assessment phases.

A CancellableTimer ticks once per interval on a scheduler and fires its
expiry callback exactly once when the countdown reaches zero. cancel() is
synchronous: once it returns, no tick or expiry callback of that timer can
run, even if the scheduler already had one queued.

Schedulers:
    ManualScheduler   - explicit clock, advanced by the caller (tests, hosts
                        that own their loop)
    AsyncioScheduler  - loop.call_later on the running asyncio loop
"""

import asyncio
import heapq
import itertools
from typing import Callable, Optional

from neuroscreen.utils.logger import debug


class ScheduledCall:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler. Nothing runs until advance() moves the clock
    past a call's due time; calls run in due-time order, FIFO on ties.
    """

    def __init__(self, start: float = 0.0):
        self.now = float(start)
        self._queue = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (call.due, next(self._seq), call))
        return call

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every call that falls due. Returns calls run."""
        target = self.now + seconds
        ran = 0

        while self._queue and self._queue[0][0] <= target:
            due, _, call = heapq.heappop(self._queue)
            self.now = due
            if call.cancelled:
                continue
            call.callback()
            ran += 1

        self.now = target
        return ran

    @property
    def pending(self) -> int:
        return sum(1 for _, _, c in self._queue if not c.cancelled)


class AsyncioScheduler:
    """Schedules on the running event loop; must be used from inside it."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self):
        return self._loop or asyncio.get_running_loop()

    def time(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]):
        return self.loop.call_later(delay, callback)


class CancellableTimer:
    """
    One countdown of `seconds` whole ticks.

    on_tick(remaining) runs after every decrement; on_expire() runs once when
    remaining first reaches zero.
    """

    def __init__(
        self,
        scheduler,
        seconds: int,
        on_expire: Callable[[], None],
        on_tick: Optional[Callable[[int], None]] = None,
        interval: float = 1.0,
        name: str = "timer",
    ):
        self.scheduler = scheduler
        self.remaining = int(seconds)
        self.interval = interval
        self.name = name

        self._on_expire = on_expire
        self._on_tick = on_tick
        self._handle = None

        self.started = False
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return self.started and not (self.cancelled or self.fired)

    def start(self):
        if self.started:
            return
        self.started = True
        debug(f"[TIMER] {self.name} start {self.remaining}s")

        if self.remaining <= 0:
            self._fire()
            return
        self._schedule()

    def cancel(self):
        if self.cancelled:
            return
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        debug(f"[TIMER] {self.name} cancelled at {self.remaining}s")

    def _schedule(self):
        self._handle = self.scheduler.call_later(self.interval, self._tick)

    def _tick(self):
        self._handle = None

        # A call queued before cancel() can still be dispatched by some
        # schedulers; it must be a no-op.
        if self.cancelled or self.fired:
            return

        self.remaining = max(0, self.remaining - 1)
        if self._on_tick is not None:
            self._on_tick(self.remaining)

        # on_tick may cancel us
        if self.cancelled:
            return

        if self.remaining <= 0:
            self._fire()
        else:
            self._schedule()

    def _fire(self):
        if self.fired:
            return
        self.fired = True
        debug(f"[TIMER] {self.name} expired")
        self._on_expire()
