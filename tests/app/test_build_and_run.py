import json

import pytest
from pydantic import ValidationError

from route_sim.app.build import build
from route_sim.app.protocols import ProgressSink
from route_sim.config.models import DirectionsOsrmModel, ScenarioModel, load_scenario
from route_sim.domain.entities.geography import Route, Waypoint
from route_sim.domain.entities.speed import Speed
from route_sim.domain.traversal.engine import Outcome, Phase
from route_sim.io.records import CompletedRecord, PositionRecord
from route_sim.io.recorder import MemorySink
from route_sim.services.directions import DirectRouteProvider, OsrmDirectionsProvider

A, B = Waypoint(0.0, 0.0), Waypoint(0.0, 0.001)


def base_cfg(**overrides):
    cfg = {
        "run_id": "t1",
        "sim": {"epoch": [2025, 1, 1, 8, 0, 0]},
        "traversal": {"speed": "race", "direct_route": True},
    }
    cfg.update(overrides)
    return cfg


# ---------- wiring ----------


def test_build_from_mapping_wires_direct_route_and_speed():
    sink = MemorySink()
    app = build(base_cfg(), use_logging=False, sinks=[sink])
    assert app.config.traversal.speed is Speed.RACE
    assert isinstance(app.route_source.provider, DirectRouteProvider)
    assert app.clock.iso(0.0) == "2025-01-01T08:00:00+00:00"
    assert app.location_store is None


def test_navigate_walks_straight_line_and_records_progress():
    sink = MemorySink()
    app = build(base_cfg(), use_logging=False, sinks=[sink])
    done = []

    assert app.navigate(B, source=A, on_complete=lambda: done.append(True)) is Outcome.OK
    app.scheduler.run()

    positions = [r for r in sink.records if isinstance(r, PositionRecord)]
    completed = [r for r in sink.records if isinstance(r, CompletedRecord)]
    # 111.3 m at 27 m/tick: start + 4 steps + landing
    assert len(positions) == 6
    assert [r.seq for r in positions] == list(range(1, 7))
    assert [r.t for r in positions] == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]
    assert (positions[-1].lat, positions[-1].lon) == (B.lat, B.lon)
    assert positions[1].heading_deg == pytest.approx(90.0, abs=1e-6)
    assert positions[0].remaining == 0
    assert all(r.run_id == "t1" for r in sink.records)

    assert len(completed) == 1 and completed[0].ticks == 5
    assert sink.records[-1] is completed[0]
    assert done == [True]
    assert app.engine.phase is Phase.COMPLETED


def test_start_uses_configured_speed_unless_overridden():
    app = build(base_cfg(), use_logging=False)
    app.start(Route((A, B)))
    assert app.engine.speed is Speed.RACE
    app.start(Route((A, B)), "walk")
    assert app.engine.speed is Speed.WALK


def test_navigate_without_any_known_location_is_no_route():
    app = build(base_cfg(), use_logging=False)
    assert app.navigate(B) is Outcome.NO_ROUTE
    assert app.engine.phase is Phase.IDLE


def test_navigate_from_last_location(tmp_path):
    store_path = tmp_path / "last.json"
    store_path.write_text(json.dumps({"lat": A.lat, "lon": A.lon}))
    app = build(base_cfg(output={"location_path": str(store_path)}), use_logging=False)

    assert app.last_location() == A
    assert app.navigate(B) is Outcome.OK
    app.scheduler.run()
    # every emission is persisted, so the store ends at the destination
    assert json.loads(store_path.read_text()) == {"lat": B.lat, "lon": B.lon}
    assert app.last_location() == B


def test_gpx_output_tracks_latest_position(tmp_path):
    gpx = tmp_path / "out" / "Simulated Location.gpx"
    app = build(base_cfg(output={"gpx_path": str(gpx)}), use_logging=False)
    app.start(Route((A, B)))
    assert f'lat="{A.lat!r}"' in gpx.read_text()
    app.scheduler.run()
    text = gpx.read_text()
    assert f'lon="{B.lon!r}"' in text
    assert "<name>Simulated Location</name>" in text


def test_osrm_directions_from_config():
    class Session:
        def get(self, url, params=None, timeout=None):
            raise AssertionError("not called")

    cfg = base_cfg(
        traversal={"direct_route": False},
        directions={"kind": "osrm", "walking_url": "http://foot", "timeout_s": 2},
    )
    app = build(cfg, use_logging=False, deps={"session": Session()})
    assert isinstance(app.config.directions, DirectionsOsrmModel)
    provider = app.route_source.provider
    assert isinstance(provider, OsrmDirectionsProvider)
    assert provider.timeout_s == 2


def test_build_with_logging_hooks_runs(caplog):
    import logging

    app = build(base_cfg(), use_logging=True)
    with caplog.at_level(logging.INFO, logger="route_sim"):
        app.start(Route((A, B)))
        app.scheduler.run()
    messages = [r.getMessage() for r in caplog.records]
    assert "traversal_started" in messages
    assert "traversal_completed" in messages


# ---------- config validation ----------


@pytest.mark.parametrize(
    "bad",
    [
        {"traversal": {"speed": "teleport"}},
        {"sim": {"tick_interval_s": 0}},
        {"log": {"level": "CHATTY"}},
        {"directions": {"kind": "carrier-pigeon"}},
        {"unexpected": 1},
        {"traversal": {"speed": "walk", "jitter": 0.5}},
    ],
)
def test_invalid_config_rejected(bad):
    with pytest.raises(ValidationError):
        ScenarioModel.model_validate(bad)


def test_speed_accepts_names_and_values():
    assert ScenarioModel.model_validate({"traversal": {"speed": "Drive"}}).traversal.speed is Speed.DRIVE
    assert ScenarioModel.model_validate({"traversal": {"speed": 2.8}}).traversal.speed is Speed.RUN


def test_load_scenario_file(tmp_path):
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps({"name": "commute", "directions": {"kind": "osrm"}}))
    model = load_scenario(path)
    assert model.name == "commute"
    assert model.directions.driving_url == "http://localhost:5000"
    assert model.sim.tick_interval_s == 1.0


# ---------- rejected starts keep the live run's records ----------


def test_rejected_start_keeps_progress_numbering_of_live_run():
    sink = MemorySink()
    app = build(base_cfg(traversal={"speed": "walk"}), use_logging=False, sinks=[sink])
    app.start(Route((A, B)))
    app.scheduler.run(until=5.0)
    heading = app.progress.heading.heading_deg

    assert app.start(Route((A,))) is Outcome.TOO_FEW_POINTS
    assert app.start(None) is Outcome.NO_ROUTE
    with pytest.raises(ValueError):
        app.start([(0.0, 0.0), (0.0, "east")])
    assert app.progress.heading.heading_deg == heading
    app.scheduler.run(until=8.0)

    seqs = [r.seq for r in sink.records if isinstance(r, PositionRecord)]
    assert seqs == list(range(1, 10))
    assert app.engine.phase is Phase.RUNNING


def test_accepted_restart_renumbers_from_one():
    sink = MemorySink()
    app = build(base_cfg(), use_logging=False, sinks=[sink])
    app.start(Route((A, B)))
    app.scheduler.run(until=2.0)
    sink.records.clear()

    app.start([(0.0, 0.001), (0.0, 0.0)])
    app.scheduler.run()
    positions = [r for r in sink.records if isinstance(r, PositionRecord)]
    assert positions[0].seq == 1 and (positions[0].lat, positions[0].lon) == (B.lat, B.lon)
    assert positions[1].heading_deg == pytest.approx(270.0, abs=1e-6)


def test_reporter_is_a_progress_sink():
    app = build(base_cfg(), use_logging=False)
    assert isinstance(app.progress, ProgressSink)


# ---------- manual placement, favorites, speed preference ----------


def test_teleport_stops_traversal_and_updates_outputs(tmp_path):
    gpx, last = tmp_path / "loc.gpx", tmp_path / "last.json"
    sink = MemorySink()
    app = build(
        base_cfg(output={"gpx_path": str(gpx), "location_path": str(last)}),
        use_logging=False,
        sinks=[sink],
    )
    app.start(Route((A, B)))
    app.scheduler.run(until=2.0)

    there = Waypoint(48.8584, 2.2945)
    assert app.teleport((48.8584, 2.2945)) == there
    assert app.engine.phase is Phase.IDLE
    assert app.scheduler.pending == 0
    assert sink.records[-1].seq == 1  # a fresh placement, not part of the walk
    assert (sink.records[-1].lat, sink.records[-1].lon) == (there.lat, there.lon)
    assert 'lat="48.8584"' in gpx.read_text()
    assert json.loads(last.read_text()) == {"lat": there.lat, "lon": there.lon}
    assert app.last_location() == there


def test_nudge_moves_along_heading_at_preferred_speed():
    from route_sim.domain.mechanics.geodesy import geodesic_distance_m

    sink = MemorySink()
    app = build(base_cfg(traversal={"speed": "run"}), use_logging=False, sinks=[sink])
    assert app.nudge(0.0) is None  # nowhere to move from yet
    assert sink.records == []

    start = app.teleport(Waypoint(45.0, 7.0))
    north = app.nudge(0.0)
    assert north.lat > start.lat
    assert geodesic_distance_m(start, north) == pytest.approx(Speed.RUN.mps, abs=1e-6)
    assert sink.records[-1].heading_deg == pytest.approx(0.0, abs=1e-6)

    back = app.nudge(0.0, -Speed.RUN.mps)
    assert back.lat == pytest.approx(start.lat, abs=1e-9)
    assert [r.seq for r in sink.records] == [1, 2, 3]
    assert app.last_location() == back


def test_favorites_save_and_navigate(tmp_path):
    favs = tmp_path / "favorites.json"
    app = build(base_cfg(output={"favorites_path": str(favs)}), use_logging=False)
    assert app.save_favorite("home") is None  # no location yet

    app.teleport(B)
    saved = app.save_favorite("Office")
    assert saved.position == B
    app.save_favorite(position=(1.0, 2.0))
    assert [f.name for f in app.favorites.load()] == ["Office", None]

    app.teleport(A)
    done = []
    assert app.navigate_to_favorite("office", on_complete=lambda: done.append(True)) is Outcome.OK
    app.scheduler.run()
    assert done == [True] and app.engine.position == B
    assert app.navigate_to_favorite("gym") is Outcome.NO_ROUTE


def test_save_favorite_requires_a_store():
    app = build(base_cfg(), use_logging=False)
    app.teleport(A)
    with pytest.raises(RuntimeError):
        app.save_favorite("home")


def test_speed_preference_persists_between_builds(tmp_path):
    cfg = base_cfg(output={"speed_path": str(tmp_path / "speed.json")})
    app = build(cfg, use_logging=False)
    assert app.speed is Speed.RACE  # nothing saved yet: config wins
    app.start(Route((A, B)))
    assert app.set_speed("cycle") is Speed.CYCLE
    assert app.engine.speed is Speed.CYCLE  # live traversal follows

    again = build(cfg, use_logging=False)
    assert again.speed is Speed.CYCLE
    again.start(Route((A, B)))
    assert again.engine.speed is Speed.CYCLE
