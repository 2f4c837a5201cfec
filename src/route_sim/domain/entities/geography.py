import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

EARTH_RADIUS_M = 6_378_000.0  # spherical radius used by the planar step math


# Geographic coordinate in decimal degrees
@dataclass(frozen=True)
class Waypoint:
    lat: float
    lon: float

    def __post_init__(self):
        if not (math.isfinite(self.lat) and math.isfinite(self.lon)):
            raise ValueError(f"coordinates must be finite, got ({self.lat}, {self.lon})")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"longitude out of range: {self.lon}")

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lon)


LatLon = Waypoint | tuple[float, float]


def to_waypoint(p: LatLon) -> Waypoint:
    if isinstance(p, Waypoint):
        return p
    try:
        lat, lon = tuple(p)[:2]
        return Waypoint(float(lat), float(lon))
    except (TypeError, ValueError) as e:
        raise ValueError(f"expected a (lat, lon) pair, got {p!r}: {e}") from e


@dataclass(frozen=True)
class Route:
    """Ordered waypoints to traverse. Never mutated; the engine copies it into a queue."""

    points: tuple[Waypoint, ...]

    @classmethod
    def from_pairs(cls, pairs: Iterable[LatLon]) -> "Route":
        return cls(tuple(to_waypoint(p) for p in pairs))

    @classmethod
    def from_lonlat(cls, coords: Iterable[Iterable[float]]) -> "Route":
        """GeoJSON order: [lon, lat, (alt)]."""
        pts = []
        for c in coords:
            lon, lat = list(c)[:2]
            pts.append(Waypoint(float(lat), float(lon)))
        return cls(tuple(pts))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(self.points)

    def __getitem__(self, i: int) -> Waypoint:
        return self.points[i]

    @property
    def traversable(self) -> bool:
        return len(self.points) >= 2

    @property
    def start(self) -> Waypoint | None:
        return self.points[0] if self.points else None

    @property
    def end(self) -> Waypoint | None:
        return self.points[-1] if self.points else None

    def length_m(self) -> float:
        from route_sim.domain.mechanics.planar import distance_m

        return sum(distance_m(a, b) for a, b in zip(self.points, self.points[1:]))

    def estimated_ticks(self, meters_per_tick: float) -> int:
        """Ticks the engine needs for the whole route: floor(D/S) steps plus one landing per segment."""
        from route_sim.domain.mechanics.planar import tick_budget

        return sum(
            tick_budget(a, b, meters_per_tick) + 1
            for a, b in zip(self.points, self.points[1:])
            if a != b
        )
