from collections.abc import Callable
from typing import Protocol, runtime_checkable

from route_sim.domain.entities.geography import Route, Waypoint
from route_sim.domain.entities.speed import TravelMode


# ------------- Scheduling --------------------
@runtime_checkable
class TickHandle(Protocol):
    """Cancellation handle for one scheduled callback. cancel() is idempotent."""

    @property
    def cancelled(self) -> bool: ...
    def cancel(self) -> None: ...


@runtime_checkable
class TickScheduler(Protocol):
    """
    Responsibilities:
      • Run a callback once after delay_s seconds on the owning context.
      • Never run two callbacks concurrently.
    Implementations: virtual time (sim.kernel.Kernel), wall clock (sim.realtime.AsyncioScheduler).
    """

    @property
    def now(self) -> float: ...
    def schedule_after(self, delay_s: float, callback: Callable[[], None]) -> TickHandle: ...


# ------------- Collaborators --------------------
@runtime_checkable
class ProgressSink(Protocol):
    """Consumer of emitted positions. It may pause, reset or restart the engine from inside the call."""

    def __call__(self, position: Waypoint) -> None: ...


@runtime_checkable
class DirectionsProvider(Protocol):
    """
    Resolve an ordered point list between two places for one travel mode.
    Return None when no route exists; raise DirectionsError on transport failures.
    """

    def directions(
        self, source: Waypoint, destination: Waypoint, mode: TravelMode
    ) -> Route | None: ...


@runtime_checkable
class RecordSink(Protocol):
    def write(self, record) -> None: ...
