"""
Route files for the command line.

Accepted JSON shapes:
  [[lat, lon], ...]                         plain point list
  {"points": [[lat, lon], ...]}
  GeoJSON LineString / Feature / FeatureCollection ([lon, lat] order; the
  first LineString found is used)
"""

import json
import os

from route_sim.domain.entities.geography import Route


def parse_route(data) -> Route:
    if isinstance(data, list):
        return Route.from_pairs(data)
    if not isinstance(data, dict):
        raise ValueError(f"Unsupported route document: {type(data).__name__}")
    if "points" in data:
        return Route.from_pairs(data["points"])

    kind = data.get("type")
    if kind == "LineString":
        return Route.from_lonlat(data.get("coordinates", []))
    if kind == "Feature":
        return parse_route(data.get("geometry") or {})
    if kind == "FeatureCollection":
        for feature in data.get("features", []):
            geometry = (feature or {}).get("geometry") or {}
            if geometry.get("type") == "LineString":
                return Route.from_lonlat(geometry.get("coordinates", []))
        raise ValueError("FeatureCollection has no LineString feature")
    raise ValueError(f"Unsupported route document type: {kind!r}")


def load_route(path: str | os.PathLike) -> Route:
    with open(path, encoding="utf-8") as f:
        return parse_route(json.load(f))
