# sim/kernel.py

import heapq
import math
import time
from collections.abc import Callable

from .hooks import NoopHooks, SchedulerHooks


class Timer:
    """Handle for one deferred callback on a Kernel."""

    __slots__ = ("due", "seq", "_callback", "_kernel", "cancelled", "fired")

    def __init__(self, due: float, seq: int, callback: Callable[[], None], kernel: "Kernel"):
        self.due = due
        self.seq = seq
        self._callback = callback
        self._kernel = kernel
        self.cancelled = False
        self.fired = False

    @property
    def done(self) -> bool:
        return self.cancelled or self.fired

    def cancel(self) -> None:
        # no-op once fired or already cancelled
        if self.done:
            return
        self.cancelled = True
        self._callback = None
        self._kernel._on_cancel(self)

    def _fire(self) -> None:
        cb, self._callback = self._callback, None
        self.fired = True
        cb()


class Kernel:
    """
    Virtual-time tick scheduler.

    Timers fire in due-time order, FIFO among equal due times. Time only moves
    when run()/advance() is called, so callers drive ticks deterministically.
    """

    def __init__(self, hooks: SchedulerHooks | None = None, start: float = 0.0):
        self._t = start
        self._q: list[tuple[float, int, Timer]] = []
        self._seq = 0
        self._live = 0
        self._hooks = hooks or NoopHooks()

    @property
    def now(self) -> float:
        return self._t

    @property
    def pending(self) -> int:
        return self._live

    def schedule_after(self, delay_s: float, callback: Callable[[], None]) -> Timer:
        if not math.isfinite(delay_s) or delay_s < 0:
            self._hooks.error(reason="scheduled_past", delay_s=delay_s, now=self._t)
            raise ValueError(f"delay must be a finite non-negative number, got {delay_s}")
        self._seq += 1
        timer = Timer(self._t + delay_s, self._seq, callback, self)
        heapq.heappush(self._q, (timer.due, timer.seq, timer))
        self._live += 1
        self._hooks.schedule(seq=timer.seq, due=timer.due, now=self._t, pending=self._live)
        return timer

    def _on_cancel(self, timer: Timer) -> None:
        self._live -= 1
        self._hooks.cancel(seq=timer.seq, now=self._t)

    def run(self, until: float | None = None, max_events: int | None = None) -> int:
        t0 = time.perf_counter()
        self._hooks.run_start(until=until, max_events=max_events, pending=self._live)
        processed = 0
        stopped_early = False
        while self._q and (until is None or self._q[0][0] <= until):
            due, seq, timer = heapq.heappop(self._q)
            if timer.done:
                continue  # cancelled while queued
            self._t = due
            self._live -= 1
            self._hooks.fire(seq=seq, now=self._t, pending=self._live)
            timer._fire()
            processed += 1
            if max_events and processed >= max_events:
                stopped_early = True
                break
        if until is not None and not stopped_early and until > self._t:
            self._t = until
        self._hooks.run_end(
            processed=processed,
            last_t=self._t,
            pending=self._live,
            wall_ms=(time.perf_counter() - t0) * 1000,
        )
        return processed

    def advance(self, dt: float) -> int:
        """Fire everything due within the next dt seconds, then move the clock by dt."""
        if dt < 0:
            raise ValueError(f"cannot advance by a negative duration: {dt}")
        return self.run(until=self._t + dt)
