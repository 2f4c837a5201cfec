# app/progress.py
from collections.abc import Callable

from route_sim.domain.entities.geography import Waypoint
from route_sim.domain.mechanics.geodesy import HeadingTracker
from route_sim.io.recorder import Recorder
from route_sim.io.records import CompletedRecord, PositionRecord


class ProgressReporter:
    """
    Engine-facing progress callback: turns each emitted waypoint into a
    PositionRecord (with heading of travel) and hands it to the recorder.
    Reads only what the engine passes in.
    """

    def __init__(
        self,
        recorder: Recorder,
        *,
        run_id: str = "local",
        now: Callable[[], float] = lambda: 0.0,
        remaining: Callable[[], int] | None = None,
        heading: HeadingTracker | None = None,
    ):
        self.recorder, self.run_id, self.now = recorder, run_id, now
        self.remaining = remaining
        self.heading = heading or HeadingTracker()
        self.seq = 0
        self.last: Waypoint | None = None

    def __call__(self, position: Waypoint) -> None:
        self.seq += 1
        self.last = position
        self.recorder.emit(
            PositionRecord(
                run_id=self.run_id,
                t=self.now(),
                seq=self.seq,
                name="position",
                lat=position.lat,
                lon=position.lon,
                heading_deg=self.heading(position),
                remaining=self.remaining() if self.remaining else None,
            )
        )

    def complete(self) -> None:
        self.recorder.emit(
            CompletedRecord(
                run_id=self.run_id,
                t=self.now(),
                seq=self.seq,
                name="completed",
                ticks=max(0, self.seq - 1),  # the start position is not a tick
                lat=self.last.lat if self.last else None,
                lon=self.last.lon if self.last else None,
            )
        )

    def restart(self) -> None:
        self.seq = 0
        self.last = None
        self.heading.reset()
