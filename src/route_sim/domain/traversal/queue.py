from collections import deque
from collections.abc import Iterable

from route_sim.domain.entities.geography import Waypoint


class WaypointQueue:
    """Remaining, not-yet-visited route points. Consumed from the front only."""

    def __init__(self, points: Iterable[Waypoint] = ()):
        self._points: deque[Waypoint] = deque(points)

    def pop_front(self) -> Waypoint | None:
        # None is the normal "exhausted" signal
        return self._points.popleft() if self._points else None

    def peek(self) -> Waypoint | None:
        return self._points[0] if self._points else None

    def is_empty(self) -> bool:
        return not self._points

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"WaypointQueue(len={len(self._points)})"
