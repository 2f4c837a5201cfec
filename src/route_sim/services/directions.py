# services/directions.py
from collections.abc import Mapping

import requests

from route_sim.domain.entities.geography import Route, Waypoint
from route_sim.domain.entities.speed import TravelMode

OSRM_DRIVE = "http://localhost:5000"
OSRM_WALK = "http://localhost:5001"


class DirectionsError(RuntimeError):
    """A directions attempt failed for reasons other than 'no route exists'."""


class DirectRouteProvider:
    """Straight line from source to destination, regardless of mode."""

    def directions(self, source: Waypoint, destination: Waypoint, mode: TravelMode) -> Route:
        return Route((source, destination))


class OsrmDirectionsProvider:
    """
    Directions from an OSRM HTTP server (one base URL per profile).

    GET {base}/route/v1/{profile}/{lon},{lat};{lon},{lat}?overview=full&geometries=geojson
    The full-overview GeoJSON geometry becomes the route's point list.
    """

    def __init__(
        self,
        base_urls: Mapping[TravelMode, str] | None = None,
        *,
        timeout_s: float = 60.0,
        session: requests.Session | None = None,
    ):
        self.base_urls = dict(
            base_urls or {TravelMode.WALKING: OSRM_WALK, TravelMode.DRIVING: OSRM_DRIVE}
        )
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def url_for(self, source: Waypoint, destination: Waypoint, mode: TravelMode) -> str:
        base = self.base_urls.get(mode)
        if not base:
            raise DirectionsError(f"no OSRM endpoint configured for {mode.value!r}")
        coords = f"{source.lon},{source.lat};{destination.lon},{destination.lat}"
        return f"{base.rstrip('/')}/route/v1/{mode.value}/{coords}"

    def directions(
        self, source: Waypoint, destination: Waypoint, mode: TravelMode
    ) -> Route | None:
        url = self.url_for(source, destination, mode)
        try:
            r = self.session.get(
                url,
                params={"overview": "full", "geometries": "geojson", "steps": "false"},
                timeout=self.timeout_s,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise DirectionsError(f"OSRM request failed: {e}") from e

        code = data.get("code")
        if code in ("NoRoute", "NoSegment"):
            return None
        if code != "Ok":
            raise DirectionsError(f"OSRM error {code!r}: {data.get('message', '')}")

        routes = data.get("routes") or []
        if not routes:
            return None
        try:
            return Route.from_lonlat(routes[0]["geometry"]["coordinates"])
        except (KeyError, TypeError, ValueError) as e:
            raise DirectionsError(f"malformed OSRM geometry: {e}") from e
