import math

import pytest

from route_sim.domain.entities.geography import Route, Waypoint
from route_sim.domain.mechanics.geodesy import (
    HeadingTracker,
    geodesic_distance_m,
    heading_between,
    nudge,
)
from route_sim.domain.mechanics.planar import (
    M_PER_DEG_LAT,
    distance_m,
    meters_per_degree,
    project,
    step_toward,
    tick_budget,
    unproject,
)


def test_degree_scale_shrinks_toward_poles():
    m_lat, m_lon = meters_per_degree(0.0)
    assert m_lat == m_lon == pytest.approx(111_316.66, abs=0.01)
    _, m_lon60 = meters_per_degree(60.0)
    assert m_lon60 == pytest.approx(m_lat / 2, rel=1e-9)


def test_project_unproject_round_trip():
    origin = Waypoint(48.8566, 2.3522)
    p = Waypoint(48.8600, 2.3600)
    back = unproject(project(p, origin), origin)
    assert back.lat == pytest.approx(p.lat, abs=1e-12)
    assert back.lon == pytest.approx(p.lon, abs=1e-12)


def test_distance_along_equator():
    d = distance_m(Waypoint(0.0, 0.0), Waypoint(0.0, 0.001))
    assert d == pytest.approx(0.001 * M_PER_DEG_LAT)


def test_longitude_wraps_across_antimeridian():
    a, b = Waypoint(0.0, 179.9995), Waypoint(0.0, -179.9995)
    assert distance_m(a, b) == pytest.approx(0.001 * M_PER_DEG_LAT, rel=1e-6)
    mid = step_toward(a, b, 0.0005 * M_PER_DEG_LAT)
    assert abs(abs(mid.lon) - 180.0) < 1e-9


def test_step_toward_moves_exact_length_without_overshoot():
    a, b = Waypoint(52.0, 13.0), Waypoint(52.001, 13.002)
    p = step_toward(a, b, 10.0)
    assert distance_m(a, p) == pytest.approx(10.0, rel=1e-9)
    # remaining distance shrinks by the step
    assert distance_m(p, b) == pytest.approx(distance_m(a, b) - 10.0, abs=1e-3)
    assert step_toward(b, b, 10.0) == b


def test_tick_budget_is_floor_of_distance_over_step():
    a, b = Waypoint(0.0, 0.0), Waypoint(0.0, 0.001)
    assert tick_budget(a, b, 1.2) == math.floor(0.001 * M_PER_DEG_LAT / 1.2) == 92
    assert tick_budget(a, b, 200.0) == 0
    with pytest.raises(ValueError):
        tick_budget(a, b, 0.0)


def test_route_length_and_estimated_ticks():
    route = Route.from_pairs([(0, 0), (0, 0.001), (0, 0.001), (0, 0.002)])
    assert route.length_m() == pytest.approx(0.002 * M_PER_DEG_LAT)
    # two real segments of 92 steps + 1 landing each; the duplicate point costs nothing
    assert route.estimated_ticks(1.2) == 186


def test_waypoint_validation():
    with pytest.raises(ValueError):
        Waypoint(91.0, 0.0)
    with pytest.raises(ValueError):
        Waypoint(0.0, 181.0)
    with pytest.raises(ValueError):
        Waypoint(float("nan"), 0.0)


def test_route_from_lonlat_swaps_axes():
    route = Route.from_lonlat([[13.4, 52.5], [13.5, 52.6, 34.0]])
    assert route.points == (Waypoint(52.5, 13.4), Waypoint(52.6, 13.5))
    assert route.start == Waypoint(52.5, 13.4) and route.end == Waypoint(52.6, 13.5)


# ---------- ellipsoidal helpers


def test_nudge_north_and_back():
    start = Waypoint(45.0, 7.0)
    north = nudge(start, 0.0, 1000.0)
    assert north.lat > start.lat
    assert north.lon == pytest.approx(start.lon, abs=1e-9)
    assert geodesic_distance_m(start, north) == pytest.approx(1000.0, abs=1e-6)

    back = nudge(north, 0.0, -1000.0)
    assert back.lat == pytest.approx(start.lat, abs=1e-9)
    assert back.lon == pytest.approx(start.lon, abs=1e-9)


def test_heading_between_cardinals():
    o = Waypoint(0.0, 0.0)
    assert heading_between(o, Waypoint(0.0, 0.01)) == pytest.approx(90.0, abs=1e-6)
    assert heading_between(o, Waypoint(-0.01, 0.0)) == pytest.approx(180.0, abs=1e-6)
    assert heading_between(o, Waypoint(0.0, -0.01)) == pytest.approx(270.0, abs=1e-6)


def test_heading_tracker_holds_when_standing_still():
    track = HeadingTracker(initial_deg=15.0)
    assert track(Waypoint(0.0, 0.0)) == 15.0
    assert track(Waypoint(0.0, 0.001)) == pytest.approx(90.0, abs=1e-6)
    assert track(Waypoint(0.0, 0.001)) == pytest.approx(90.0, abs=1e-6)
