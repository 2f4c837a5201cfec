# io/location_store.py
import json
import logging
import os
from pathlib import Path

from route_sim.domain.entities.geography import Waypoint
from route_sim.io.gpx import write_atomic
from route_sim.io.records import PositionRecord

log = logging.getLogger(__name__)


class LocationStore:
    """Last known location, persisted as {"lat": .., "lon": ..}."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def load(self) -> Waypoint | None:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return Waypoint(float(data["lat"]), float(data["lon"]))
        except FileNotFoundError:
            return None
        except (ValueError, KeyError, TypeError) as e:
            log.warning("ignoring unreadable last location %s: %s", self.path, e)
            return None

    def save(self, position: Waypoint) -> None:
        write_atomic(self.path, json.dumps({"lat": position.lat, "lon": position.lon}))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    # RecordSink
    def write(self, record) -> None:
        if isinstance(record, PositionRecord):
            self.save(Waypoint(record.lat, record.lon))
