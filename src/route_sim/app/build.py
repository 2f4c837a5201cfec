# route_sim/app/build.py
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass

from route_sim.app.progress import ProgressReporter
from route_sim.app.protocols import RecordSink, TickScheduler
from route_sim.app.route_source import FallbackRouteSource
from route_sim.config.models import ScenarioModel
from route_sim.domain.entities.geography import LatLon, Route, Waypoint, to_waypoint
from route_sim.domain.entities.speed import Speed
from route_sim.domain.mechanics import geodesy
from route_sim.domain.traversal.engine import Outcome, Phase, TraversalEngine
from route_sim.io.engine_logging import EngineLogging  # JSON logs
from route_sim.io.gpx import GpxSink
from route_sim.io.location_store import LocationStore
from route_sim.io.preferences import Favorite, FavoritesStore, SpeedStore
from route_sim.io.recorder import JsonlSink, Recorder
from route_sim.runtime.registries import make_directions
from route_sim.services.directions import DirectRouteProvider
from route_sim.sim.clock import SimClock
from route_sim.sim.hooks import NoopHooks
from route_sim.sim.kernel import Kernel

log = logging.getLogger(__name__)


@dataclass
class App:
    config: ScenarioModel
    clock: SimClock
    scheduler: TickScheduler
    engine: TraversalEngine
    route_source: FallbackRouteSource
    recorder: Recorder
    progress: ProgressReporter
    location_store: LocationStore | None = None
    favorites: FavoritesStore | None = None
    speed_store: SpeedStore | None = None
    speed: Speed = Speed.WALK

    # ---------------- traversal ----------------

    def start(
        self,
        route: Route | Iterable[LatLon] | None,
        speed: Speed | str | None = None,
        *,
        on_complete: Callable[[], None] | None = None,
    ) -> Outcome:
        # the reporter restarts on the first emission, which only an accepted start makes
        fresh = True

        def _progress(position: Waypoint) -> None:
            nonlocal fresh
            if fresh:
                fresh = False
                self.progress.restart()
            self.progress(position)

        def _complete():
            self.progress.complete()
            if on_complete is not None:
                on_complete()

        return self.engine.start(
            route,
            speed if speed is not None else self.speed,
            on_progress=_progress,
            on_complete=_complete,
        )

    def navigate(
        self,
        destination: LatLon,
        *,
        source: LatLon | None = None,
        speed: Speed | str | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> Outcome:
        """Resolve a route from source (default: last known location) and start walking it."""
        speed = Speed.parse(speed if speed is not None else self.speed)
        if source is None:
            source = self.last_location()
        if source is None:
            return self.engine.start(None)
        route = self.route_source.route_for_speed(source, destination, speed)
        return self.start(route, speed, on_complete=on_complete)

    def navigate_to_favorite(self, name: str, **kw) -> Outcome:
        favorite = self.favorites.find(name) if self.favorites else None
        if favorite is None:
            log.warning("no favorite named %r", name)
            return self.engine.start(None)
        return self.navigate(favorite.position, **kw)

    def set_speed(self, speed: Speed | str) -> Speed:
        """Preferred speed for later starts and manual moves; also applied to a live traversal."""
        self.speed = Speed.parse(speed)
        if self.engine.phase in (Phase.RUNNING, Phase.PAUSED):
            self.engine.set_speed(self.speed)
        if self.speed_store is not None:
            self.speed_store.save(self.speed)
        return self.speed

    # ---------------- manual placement ----------------

    def teleport(self, position: LatLon) -> Waypoint:
        """Drop any traversal and put the simulated location at position."""
        position = to_waypoint(position)
        if self.engine.phase is not Phase.IDLE:
            self.engine.reset()
        self.progress.restart()
        self.progress(position)
        return position

    def nudge(self, heading_deg: float, distance_m: float | None = None) -> Waypoint | None:
        """
        Step the simulated location along heading_deg (negative distance steps
        back). The default step is one second at the preferred speed. Stops any
        traversal. None when no location is known yet.
        """
        current = self.last_location()
        if current is None:
            return None
        if self.engine.phase is not Phase.IDLE:
            self.engine.reset()
        if distance_m is None:
            distance_m = self.speed.mps
        position = geodesy.nudge(current, heading_deg, distance_m)
        self.progress(position)
        return position

    def save_favorite(self, name: str | None = None, position: LatLon | None = None) -> Favorite | None:
        if self.favorites is None:
            raise RuntimeError("no favorites file configured (output.favorites_path)")
        position = to_waypoint(position) if position is not None else self.last_location()
        if position is None:
            return None
        return self.favorites.add(position, name)

    def last_location(self) -> Waypoint | None:
        if self.progress.last is not None:
            return self.progress.last
        if self.engine.position is not None:
            return self.engine.position
        return self.location_store.load() if self.location_store else None


def build(
    cfg: ScenarioModel | Mapping,
    *,
    scheduler: TickScheduler | None = None,
    use_logging: bool = True,
    sinks: Sequence[RecordSink] = (),
    deps: dict | None = None,
) -> App:
    # 0) Validate config
    model = cfg if isinstance(cfg, ScenarioModel) else ScenarioModel.model_validate(cfg)

    # 1) Clock & hooks
    clock = SimClock.utc_epoch(*model.sim.epoch) if model.sim.epoch else SimClock.utc_now()
    hooks = (
        EngineLogging(
            run_id=model.run_id,
            clock=clock,
            level=model.log.level,
            debug=model.log.debug,
            sample_every=model.log.sample_every,
        )
        if use_logging
        else NoopHooks()
    )

    # 2) Scheduler (virtual time unless one is injected) and engine
    scheduler = scheduler if scheduler is not None else Kernel(hooks=hooks)
    engine = TraversalEngine(scheduler, tick_interval_s=model.sim.tick_interval_s, hooks=hooks)

    # 3) Progress sinks
    out = model.output
    recorder = Recorder(*sinks)
    if out.jsonl:
        recorder.add(JsonlSink())
    if out.gpx_path:
        recorder.add(GpxSink(out.gpx_path))
    store = LocationStore(out.location_path) if out.location_path else None
    if store is not None:
        recorder.add(store)

    progress = ProgressReporter(
        recorder,
        run_id=model.run_id,
        now=lambda: scheduler.now,
        remaining=lambda: engine.remaining,
    )

    # 4) Route source
    provider = (
        DirectRouteProvider()
        if model.traversal.direct_route
        else make_directions(model.directions, deps=deps)
    )
    route_source = FallbackRouteSource(provider)

    # 5) Preferences
    favorites = FavoritesStore(out.favorites_path) if out.favorites_path else None
    speed_store = SpeedStore(out.speed_path) if out.speed_path else None
    speed = (speed_store.load() if speed_store else None) or model.traversal.speed

    return App(
        model,
        clock,
        scheduler,
        engine,
        route_source,
        recorder,
        progress,
        store,
        favorites,
        speed_store,
        speed,
    )
