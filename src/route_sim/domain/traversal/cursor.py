from dataclasses import dataclass

from route_sim.domain.entities.geography import Waypoint
from route_sim.domain.mechanics.planar import step_toward, tick_budget

UNSET = -1  # budget not computed yet for this segment


@dataclass(frozen=True)
class Step:
    position: Waypoint
    arrived: bool  # position is exactly the segment end


@dataclass
class SegmentCursor:
    start: Waypoint | None = None
    end: Waypoint | None = None
    ticks_remaining: int = UNSET

    @property
    def active(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def degenerate(self) -> bool:
        return self.active and self.start == self.end

    def enter(self, start: Waypoint, end: Waypoint) -> None:
        self.start, self.end = start, end
        self.ticks_remaining = UNSET

    def clear(self) -> None:
        self.start = self.end = None
        self.ticks_remaining = UNSET

    def advance(self, position: Waypoint, step_m: float) -> Step:
        """
        One tick along the segment from position.

        The budget is fixed on the first tick of a segment. While it lasts each
        tick moves step_m toward the end; once spent, the position snaps to the
        end exactly so float error never accumulates across segments.
        """
        if not self.active:
            raise RuntimeError("no active segment")
        if self.ticks_remaining == UNSET:
            self.ticks_remaining = tick_budget(position, self.end, step_m)
        if self.ticks_remaining == 0:
            return Step(self.end, arrived=True)
        self.ticks_remaining -= 1
        return Step(step_toward(position, self.end, step_m), arrived=False)
