# domain/traversal/engine.py
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from route_sim.app.protocols import ProgressSink, TickHandle, TickScheduler
from route_sim.domain.entities.geography import LatLon, Route, Waypoint, to_waypoint
from route_sim.domain.entities.speed import Speed
from route_sim.domain.traversal.cursor import SegmentCursor
from route_sim.domain.traversal.queue import WaypointQueue
from route_sim.sim.clock import TICK_S
from route_sim.sim.hooks import EngineHooks, NoopHooks

CompleteFn = Callable[[], None]


class Phase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class Outcome(Enum):
    OK = "ok"
    NO_ROUTE = "no_route"  # route source gave nothing
    TOO_FEW_POINTS = "too_few_points"  # fewer than two waypoints
    NOT_APPLICABLE = "not_applicable"  # transition undefined in the current phase


@dataclass(frozen=True)
class TraversalSnapshot:
    phase: Phase
    generation: int
    speed: Speed
    paused: bool
    position: Waypoint | None
    segment_start: Waypoint | None
    segment_end: Waypoint | None
    ticks_remaining: int
    remaining: int
    ticks: int


class TraversalEngine:
    """
    Walks one route at a time, one interpolated position per tick.

    IDLE --start--> RUNNING <--pause/resume--> PAUSED
    RUNNING --last segment landed--> COMPLETED
    any --reset--> IDLE

    Every transition is total: calls that make no sense in the current phase
    return Outcome.NOT_APPLICABLE instead of raising. Each scheduled tick
    carries a token; reset/pause/restart drop the token so a callback the
    scheduler failed to cancel finds nothing to do.
    """

    def __init__(
        self,
        scheduler: TickScheduler,
        *,
        tick_interval_s: float = TICK_S,
        hooks: EngineHooks | None = None,
    ):
        if not tick_interval_s > 0:
            raise ValueError(f"tick interval must be positive, got {tick_interval_s}")
        self._scheduler = scheduler
        self._interval = tick_interval_s
        self._hooks = hooks or NoopHooks()
        self._generation = 0
        self._clear()

    def _clear(self) -> None:
        self._phase = Phase.IDLE
        self._queue = WaypointQueue()
        self._cursor = SegmentCursor()
        self._position: Waypoint | None = None
        self._speed = Speed.WALK
        self._paused = False
        self._ticks = 0
        self._pending: TickHandle | None = None
        self._token: object | None = None
        self._on_progress: ProgressSink | None = None
        self._on_complete: CompleteFn | None = None

    # ---------------- read-only view ----------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def position(self) -> Waypoint | None:
        return self._position

    @property
    def speed(self) -> Speed:
        return self._speed

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def remaining(self) -> int:
        return len(self._queue)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def tick_interval_s(self) -> float:
        return self._interval

    def snapshot(self) -> TraversalSnapshot:
        return TraversalSnapshot(
            phase=self._phase,
            generation=self._generation,
            speed=self._speed,
            paused=self._paused,
            position=self._position,
            segment_start=self._cursor.start,
            segment_end=self._cursor.end,
            ticks_remaining=self._cursor.ticks_remaining,
            remaining=len(self._queue),
            ticks=self._ticks,
        )

    # ---------------- transitions ----------------

    def start(
        self,
        route: Route | Iterable[LatLon] | None,
        speed: Speed | str = Speed.WALK,
        on_progress: ProgressSink | None = None,
        on_complete: CompleteFn | None = None,
    ) -> Outcome:
        if route is None:
            self._hooks.rejected(outcome=Outcome.NO_ROUTE.value)
            return Outcome.NO_ROUTE
        points = [to_waypoint(p) for p in route]  # raises before any state changes
        if len(points) < 2:
            self._hooks.rejected(outcome=Outcome.TOO_FEW_POINTS.value)
            return Outcome.TOO_FEW_POINTS
        speed = Speed.parse(speed)  # fail before touching a running traversal

        if self._phase is not Phase.IDLE:
            self.reset()
        self._generation += 1
        self._speed = speed
        self._on_progress, self._on_complete = on_progress, on_complete
        self._queue = WaypointQueue(points)
        start = self._queue.pop_front()
        self._cursor.enter(start, self._queue.pop_front())
        self._skip_degenerate()
        self._position = start
        self._phase = Phase.RUNNING
        self._hooks.started(generation=self._generation, points=len(points), speed=speed.name)
        self._segment_entered()

        gen = self._generation
        self._emit(start)
        if gen == self._generation and self._phase is Phase.RUNNING:
            self._schedule(self._interval)
        return Outcome.OK

    def tick(self) -> Outcome:
        """Advance one step. Normally called by the scheduler; callable directly for manual stepping."""
        if self._phase is not Phase.RUNNING:
            return Outcome.NOT_APPLICABLE
        self._cancel_pending()
        self._ticks += 1
        step = self._cursor.advance(self._position, self._speed.meters_per_tick(self._interval))
        self._position = step.position

        gen = self._generation
        self._emit(step.position)
        if gen != self._generation:
            return Outcome.OK  # restarted or reset from inside the progress callback

        if step.arrived:
            if not self._next_segment():
                self._complete()
                return Outcome.OK
            self._segment_entered()
        if self._phase is Phase.RUNNING:
            self._schedule(self._interval)
        return Outcome.OK

    def pause(self) -> Outcome:
        if self._phase is not Phase.RUNNING:
            return Outcome.NOT_APPLICABLE
        self._cancel_pending()
        self._paused = True
        self._phase = Phase.PAUSED
        self._hooks.paused(generation=self._generation, position=_coords(self._position))
        return Outcome.OK

    def resume(self) -> Outcome:
        """Unpause and run the next tick right away rather than a full interval later."""
        if self._phase is not Phase.PAUSED:
            return Outcome.NOT_APPLICABLE
        self._paused = False
        self._phase = Phase.RUNNING
        self._hooks.resumed(generation=self._generation, position=_coords(self._position))
        self._schedule(0.0)
        return Outcome.OK

    def set_paused(self, paused: bool) -> Outcome:
        if self._phase not in (Phase.RUNNING, Phase.PAUSED):
            return Outcome.NOT_APPLICABLE
        if paused == self._paused:
            return Outcome.OK
        return self.pause() if paused else self.resume()

    def set_speed(self, speed: Speed | str) -> Outcome:
        # a budget already computed for the current segment is kept
        self._speed = Speed.parse(speed)
        self._hooks.speed_changed(generation=self._generation, speed=self._speed.name)
        return Outcome.OK

    def reset(self) -> Outcome:
        self._cancel_pending()
        previous = self._phase
        self._generation += 1
        self._clear()
        self._hooks.reset(generation=self._generation, previous=previous.value)
        return Outcome.OK

    # ---------------- internals ----------------

    def _emit(self, position: Waypoint) -> None:
        self._hooks.progress(generation=self._generation, tick=self._ticks, position=_coords(position))
        if self._on_progress is not None:
            self._on_progress(position)

    def _skip_degenerate(self) -> None:
        # zero-length segments are crossed without spending a tick
        while self._cursor.degenerate and not self._queue.is_empty():
            self._cursor.enter(self._cursor.end, self._queue.pop_front())

    def _next_segment(self) -> bool:
        nxt = self._queue.pop_front()
        if nxt is None:
            return False
        self._cursor.enter(self._cursor.end, nxt)
        self._skip_degenerate()
        return not self._cursor.degenerate

    def _segment_entered(self) -> None:
        self._hooks.segment_entered(
            generation=self._generation,
            start=_coords(self._cursor.start),
            end=_coords(self._cursor.end),
            remaining=len(self._queue),
        )

    def _complete(self) -> None:
        self._phase = Phase.COMPLETED
        self._paused = False
        self._cancel_pending()
        self._hooks.completed(generation=self._generation, ticks=self._ticks)
        if self._on_complete is not None:
            self._on_complete()

    def _schedule(self, delay_s: float) -> None:
        self._cancel_pending()
        token = object()
        self._token = token
        self._pending = self._scheduler.schedule_after(delay_s, lambda: self._fire(token))

    def _fire(self, token: object) -> None:
        if token is not self._token:
            return  # stale: reset, paused or superseded after scheduling
        self._token = None
        self._pending = None
        self.tick()

    def _cancel_pending(self) -> None:
        self._token = None
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None


def _coords(p: Waypoint | None) -> tuple[float, float] | None:
    return None if p is None else p.as_tuple()
