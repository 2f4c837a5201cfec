# domain/mechanics/planar.py
"""
Local flat-earth approximation used for per-tick interpolation.

Points are projected onto an equirectangular plane centred on a reference
waypoint: one degree of latitude is a fixed number of meters, one degree of
longitude shrinks with cos(latitude). Good to well under a meter over the
few-hundred-meter segments a directions polyline is made of.
"""

import math

import numpy as np

from route_sim.domain.entities.geography import EARTH_RADIUS_M, Waypoint

M_PER_DEG_LAT = EARTH_RADIUS_M * math.pi / 180.0
_MIN_COS = 1e-12  # keeps the longitude scale invertible at the poles


def meters_per_degree(lat: float) -> tuple[float, float]:
    """(meters per degree latitude, meters per degree longitude) at lat."""
    return M_PER_DEG_LAT, M_PER_DEG_LAT * max(math.cos(math.radians(lat)), _MIN_COS)


def _wrap_lon(dlon: float) -> float:
    return (dlon + 180.0) % 360.0 - 180.0


def project(p: Waypoint, origin: Waypoint) -> np.ndarray:
    """Offset of p from origin in meters, as [east, north]."""
    m_lat, m_lon = meters_per_degree(origin.lat)
    return np.array([_wrap_lon(p.lon - origin.lon) * m_lon, (p.lat - origin.lat) * m_lat])


def unproject(xy, origin: Waypoint) -> Waypoint:
    m_lat, m_lon = meters_per_degree(origin.lat)
    lat = origin.lat + float(xy[1]) / m_lat
    lon = _wrap_lon(origin.lon + float(xy[0]) / m_lon)
    return Waypoint(min(90.0, max(-90.0, lat)), lon)


def distance_m(a: Waypoint, b: Waypoint) -> float:
    """Planar distance from a to b, projected around a."""
    return float(np.hypot(*project(b, a)))


def step_toward(current: Waypoint, target: Waypoint, step_m: float) -> Waypoint:
    """Move step_m meters from current along the straight line to target, stopping at target."""
    d = project(target, current)
    length = float(np.hypot(*d))
    if length <= step_m:
        return target
    return unproject(d * (step_m / length), current)


def tick_budget(current: Waypoint, target: Waypoint, step_m: float) -> int:
    """Whole steps of step_m that fit between current and target: floor(D / S)."""
    if not step_m > 0:
        raise ValueError(f"step must be positive, got {step_m}")
    return math.floor(distance_m(current, target) / step_m)
