# sim/hooks.py
from typing import Protocol


class SchedulerHooks(Protocol):
    def run_start(self, *, until, max_events, pending): ...
    def run_end(self, *, processed, last_t, pending, wall_ms): ...
    def schedule(self, *, seq, due, now, pending): ...
    def fire(self, *, seq, now, pending): ...
    def cancel(self, *, seq, now): ...
    def error(self, *, reason: str, **kw): ...


class EngineHooks(Protocol):
    def started(self, *, generation, points, speed): ...
    def rejected(self, *, outcome): ...
    def segment_entered(self, *, generation, start, end, remaining): ...
    def progress(self, *, generation, tick, position): ...
    def paused(self, *, generation, position): ...
    def resumed(self, *, generation, position): ...
    def speed_changed(self, *, generation, speed): ...
    def completed(self, *, generation, ticks): ...
    def reset(self, *, generation, previous): ...


class NoopHooks:
    # scheduler lifecycle
    def run_start(self, **_):
        pass

    def run_end(self, **_):
        pass

    def schedule(self, *_, **__):
        pass

    def fire(self, *_, **__):
        pass

    def cancel(self, *_, **__):
        pass

    def error(self, *_, **__):
        pass

    # traversal lifecycle
    def started(self, **_):
        pass

    def rejected(self, **_):
        pass

    def segment_entered(self, **_):
        pass

    def progress(self, **_):
        pass

    def paused(self, **_):
        pass

    def resumed(self, **_):
        pass

    def speed_changed(self, **_):
        pass

    def completed(self, **_):
        pass

    def reset(self, **_):
        pass
