# sim/realtime.py
import asyncio
import math
from collections.abc import Callable

from .hooks import NoopHooks, SchedulerHooks


class AsyncioTimer:
    __slots__ = ("seq", "handle", "fired", "_hooks", "_loop")

    def __init__(self, seq: int, hooks, loop: asyncio.AbstractEventLoop):
        self.seq, self._hooks, self._loop = seq, hooks, loop
        self.handle: asyncio.TimerHandle | None = None
        self.fired = False

    @property
    def cancelled(self) -> bool:
        return self.handle is not None and self.handle.cancelled()

    def cancel(self) -> None:
        # no-op once fired or already cancelled
        if self.fired or self.handle is None or self.handle.cancelled():
            return
        self.handle.cancel()
        self._hooks.cancel(seq=self.seq, now=self._loop.time())


class AsyncioScheduler:
    """
    Wall-clock tick scheduler on an asyncio event loop.

    All callbacks run on the loop thread, so ticks never overlap. The loop is
    resolved lazily so the scheduler can be built before asyncio.run().
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        hooks: SchedulerHooks | None = None,
    ):
        self._loop = loop
        self._hooks = hooks or NoopHooks()
        self._seq = 0

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def now(self) -> float:
        return self.loop.time()

    def schedule_after(self, delay_s: float, callback: Callable[[], None]) -> AsyncioTimer:
        if not math.isfinite(delay_s) or delay_s < 0:
            self._hooks.error(reason="scheduled_past", delay_s=delay_s)
            raise ValueError(f"delay must be a finite non-negative number, got {delay_s}")
        loop = self.loop
        self._seq += 1
        timer = AsyncioTimer(self._seq, self._hooks, loop)

        def _run():
            timer.fired = True
            self._hooks.fire(seq=timer.seq, now=loop.time(), pending=None)
            callback()

        timer.handle = loop.call_later(delay_s, _run)
        self._hooks.schedule(seq=timer.seq, due=loop.time() + delay_s, now=loop.time(), pending=None)
        return timer
