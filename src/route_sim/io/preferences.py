# io/preferences.py
"""
Saved places and the preferred speed, kept as small JSON files next to the
last known location.

favorites: [{"name": "home", "lat": .., "lon": ..}, ...]   (name may be null)
speed:     {"speed": "walk"}
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from route_sim.domain.entities.geography import Waypoint
from route_sim.domain.entities.speed import Speed
from route_sim.io.gpx import write_atomic

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Favorite:
    position: Waypoint
    name: str | None = None


class FavoritesStore:
    """Ordered list of saved places. Duplicates are allowed, as pins on a map are."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def load(self) -> list[Favorite]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return [
                Favorite(Waypoint(float(d["lat"]), float(d["lon"])), d.get("name"))
                for d in data
            ]
        except FileNotFoundError:
            return []
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            log.warning("ignoring unreadable favorites %s: %s", self.path, e)
            return []

    def save(self, favorites: list[Favorite]) -> None:
        data = [{"name": f.name, "lat": f.position.lat, "lon": f.position.lon} for f in favorites]
        write_atomic(self.path, json.dumps(data))

    def add(self, position: Waypoint, name: str | None = None) -> Favorite:
        favorite = Favorite(position, name)
        self.save([*self.load(), favorite])
        return favorite

    def remove(self, favorite: Favorite) -> bool:
        favorites = self.load()
        if favorite not in favorites:
            return False
        favorites.remove(favorite)  # first match only
        self.save(favorites)
        return True

    def find(self, name: str) -> Favorite | None:
        wanted = name.strip().casefold()
        return next(
            (f for f in self.load() if f.name is not None and f.name.casefold() == wanted),
            None,
        )


class SpeedStore:
    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def load(self) -> Speed | None:
        try:
            with open(self.path, encoding="utf-8") as f:
                return Speed.parse(json.load(f)["speed"])
        except FileNotFoundError:
            return None
        except (ValueError, KeyError, TypeError) as e:
            log.warning("ignoring unreadable speed preference %s: %s", self.path, e)
            return None

    def save(self, speed: Speed) -> None:
        write_atomic(self.path, json.dumps({"speed": speed.name.lower()}))
