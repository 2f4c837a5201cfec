# io/engine_logging.py
import json
import logging
import sys

from route_sim.sim.clock import SimClock
from route_sim.sim.hooks import NoopHooks


def _default_json_logger(name="route_sim", level="INFO"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stderr)

        class _JsonFormatter(logging.Formatter):
            def format(self, record: logging.LogRecord) -> str:
                payload = {
                    "level": record.levelname,
                    "msg": record.getMessage(),
                    "logger": record.name,
                }
                extra = getattr(record, "extra", None)
                if isinstance(extra, dict):
                    payload.update(extra)
                return json.dumps(payload, default=str)

        h.setFormatter(_JsonFormatter())
        logger.addHandler(h)
    logger.setLevel(level)
    return logger


class EngineLogging(NoopHooks):
    """
    One place to shape and emit structured logs for both the scheduler and
    the traversal engine. Lifecycle transitions log at INFO; per-tick traffic
    only in debug mode, sampled every `sample_every` ticks.
    """

    def __init__(
        self,
        run_id: str = "local",
        clock: SimClock | None = None,
        level: str = "INFO",
        debug: bool = False,
        sample_every: int = 1,
        logger: logging.Logger | None = None,
    ):
        self.run_id, self.clock, self.debug, self.sample_every = (
            run_id,
            clock,
            debug,
            max(1, sample_every),
        )
        self.log = logger or _default_json_logger(level=level)
        self._fired = 0

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        payload = {"run_id": self.run_id}
        if self.clock is not None and extra.get("now") is not None:
            payload["wall"] = self.clock.iso(extra["now"])
        self.log.log(getattr(logging, level), msg, extra={"extra": {**payload, **extra}})

    def _sampled(self, n: int) -> bool:
        return self.debug and (n % self.sample_every) == 0

    # --------------- scheduler -----------------------------

    def run_start(self, *, until, max_events, pending):
        if self.debug:
            self._emit("DEBUG", "run_start", until=until, max_events=max_events, pending=pending)

    def run_end(self, *, processed, last_t, pending, wall_ms):
        if self.debug:
            self._emit(
                "DEBUG",
                "run_end",
                processed=processed,
                now=last_t,
                pending=pending,
                wall_ms=round(wall_ms, 3),
            )

    def schedule(self, *, seq, due, now, pending):
        if self._sampled(seq):
            self._emit("DEBUG", "tick_schedule", seq=seq, due=due, now=now, pending=pending)

    def fire(self, *, seq, now, pending):
        self._fired += 1
        if self._sampled(self._fired):
            self._emit("DEBUG", "tick_fire", seq=seq, now=now, pending=pending)

    def cancel(self, *, seq, now):
        if self.debug:
            self._emit("DEBUG", "tick_cancel", seq=seq, now=now)

    def error(self, *, reason: str, **kw):
        self._emit("ERROR", "scheduler_error", reason=reason, **kw)

    # --------------- traversal -----------------------------

    def started(self, *, generation, points, speed):
        self._emit("INFO", "traversal_started", generation=generation, points=points, speed=speed)

    def rejected(self, *, outcome):
        self._emit("WARNING", "traversal_rejected", outcome=outcome)

    def segment_entered(self, *, generation, start, end, remaining):
        if self.debug:
            self._emit(
                "DEBUG",
                "segment_entered",
                generation=generation,
                start=start,
                end=end,
                remaining=remaining,
            )

    def progress(self, *, generation, tick, position):
        if self._sampled(tick):
            self._emit("DEBUG", "progress", generation=generation, tick=tick, position=position)

    def paused(self, *, generation, position):
        self._emit("INFO", "traversal_paused", generation=generation, position=position)

    def resumed(self, *, generation, position):
        self._emit("INFO", "traversal_resumed", generation=generation, position=position)

    def speed_changed(self, *, generation, speed):
        self._emit("INFO", "speed_changed", generation=generation, speed=speed)

    def completed(self, *, generation, ticks):
        self._emit("INFO", "traversal_completed", generation=generation, ticks=ticks)

    def reset(self, *, generation, previous):
        self._emit("INFO", "traversal_reset", generation=generation, previous=previous)
