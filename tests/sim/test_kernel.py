# tests/sim/test_kernel.py
import pytest

from route_sim.sim.hooks import NoopHooks
from route_sim.sim.kernel import Kernel


# --- test hook that records fire order & times ---
class TraceHooks(NoopHooks):
    def __init__(self):
        self.fired = []
        self.cancelled = []

    def fire(self, *, seq, now, pending):
        self.fired.append((now, seq))

    def cancel(self, *, seq, now):
        self.cancelled.append(seq)


def test_timers_fire_in_due_order_with_fifo_ties():
    hooks = TraceHooks()
    k = Kernel(hooks=hooks)
    seen: list[str] = []
    k.schedule_after(2.0, lambda: seen.append("late"))
    k.schedule_after(1.0, lambda: seen.append("A"))
    k.schedule_after(1.0, lambda: seen.append("B"))

    assert k.pending == 3
    assert k.run() == 3
    assert seen == ["A", "B", "late"]
    assert [t for t, _ in hooks.fired] == [1.0, 1.0, 2.0]
    assert k.now == 2.0
    assert k.pending == 0


def test_callbacks_can_reschedule_themselves():
    k = Kernel()
    times = []

    def tick():
        times.append(k.now)
        if len(times) < 4:
            k.schedule_after(1.0, tick)

    k.schedule_after(1.0, tick)
    k.run()
    assert times == [1.0, 2.0, 3.0, 4.0]


def test_run_until_leaves_later_timers_and_moves_clock():
    k = Kernel()
    seen = []
    k.schedule_after(1.0, lambda: seen.append(1))
    k.schedule_after(5.0, lambda: seen.append(5))

    assert k.run(until=3.0) == 1
    assert seen == [1]
    assert k.now == 3.0
    assert k.pending == 1

    assert k.advance(2.0) == 1
    assert seen == [1, 5]
    assert k.now == 5.0


def test_zero_delay_fires_on_advance_zero():
    k = Kernel(start=10.0)
    seen = []
    k.schedule_after(0.0, lambda: seen.append(k.now))
    assert k.advance(0.0) == 1
    assert seen == [10.0]


def test_cancel_is_idempotent_and_safe_after_fire():
    hooks = TraceHooks()
    k = Kernel(hooks=hooks)
    seen = []
    t1 = k.schedule_after(1.0, lambda: seen.append("t1"))
    t2 = k.schedule_after(2.0, lambda: seen.append("t2"))

    t2.cancel()
    t2.cancel()
    assert t2.cancelled and k.pending == 1
    assert hooks.cancelled == [t2.seq]

    k.run()
    assert seen == ["t1"]
    assert t1.fired and not t1.cancelled
    t1.cancel()  # already fired: no-op
    assert not t1.cancelled
    assert hooks.cancelled == [t2.seq]


def test_max_events_gate():
    k = Kernel()
    for _ in range(5):
        k.schedule_after(1.0, lambda: None)
    assert k.run(max_events=2) == 2
    assert k.pending == 3
    assert k.now == 1.0


def test_negative_or_nan_delay_raises():
    k = Kernel()
    with pytest.raises(ValueError):
        k.schedule_after(-1.0, lambda: None)
    with pytest.raises(ValueError):
        k.schedule_after(float("nan"), lambda: None)
    with pytest.raises(ValueError):
        k.advance(-0.5)
