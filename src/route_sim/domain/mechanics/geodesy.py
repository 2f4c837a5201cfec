# domain/mechanics/geodesy.py
"""Ellipsoidal (WGS84) helpers for manual movement and heading follow."""

from pyproj import Geod

from route_sim.domain.entities.geography import Waypoint

_GEOD = Geod(ellps="WGS84")


def nudge(position: Waypoint, heading_deg: float, distance_m: float) -> Waypoint:
    """Solve the direct problem: position moved distance_m along heading_deg.

    A negative distance steps backwards along the same heading.
    """
    if distance_m < 0:
        heading_deg, distance_m = heading_deg + 180.0, -distance_m
    lon, lat, _ = _GEOD.fwd(position.lon, position.lat, heading_deg % 360.0, distance_m)
    return Waypoint(lat, lon)


def heading_between(a: Waypoint, b: Waypoint) -> float:
    """Initial azimuth from a to b in degrees, 0 = north, in [0, 360)."""
    az, _, _ = _GEOD.inv(a.lon, a.lat, b.lon, b.lat)
    return az % 360.0


def geodesic_distance_m(a: Waypoint, b: Waypoint) -> float:
    _, _, dist = _GEOD.inv(a.lon, a.lat, b.lon, b.lat)
    return dist


class HeadingTracker:
    """Heading of travel between consecutive positions; holds the last value when standing still."""

    def __init__(self, initial_deg: float = 0.0):
        self.heading_deg = initial_deg % 360.0
        self._last: Waypoint | None = None

    def __call__(self, position: Waypoint) -> float:
        if self._last is not None and self._last != position:
            self.heading_deg = heading_between(self._last, position)
        self._last = position
        return self.heading_deg

    def reset(self) -> None:
        self._last = None
