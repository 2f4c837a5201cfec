# app/route_source.py
import logging

from route_sim.app.protocols import DirectionsProvider
from route_sim.domain.entities.geography import LatLon, Route, to_waypoint
from route_sim.domain.entities.speed import Speed, TravelMode
from route_sim.services.directions import DirectionsError

log = logging.getLogger(__name__)


class FallbackRouteSource:
    """
    Two-attempt route lookup: the requested travel mode first, then one retry
    with the fallback mode. Either a usable Route (two or more points) or None.
    """

    def __init__(self, provider: DirectionsProvider, *, fallback_mode: TravelMode = TravelMode.DRIVING):
        self.provider = provider
        self.fallback_mode = fallback_mode

    def find_route(
        self,
        source: LatLon,
        destination: LatLon,
        mode: TravelMode = TravelMode.WALKING,
    ) -> Route | None:
        a, b = to_waypoint(source), to_waypoint(destination)
        route = self._attempt(a, b, mode)
        if route is not None:
            return route
        log.warning(
            "no directions for %s, requesting %s", mode.value, self.fallback_mode.value
        )
        route = self._attempt(a, b, self.fallback_mode)
        if route is None:
            log.warning("no directions for any travel mode")
        return route

    def route_for_speed(self, source: LatLon, destination: LatLon, speed: Speed) -> Route | None:
        return self.find_route(source, destination, Speed.parse(speed).travel_mode)

    def _attempt(self, a, b, mode: TravelMode) -> Route | None:
        try:
            route = self.provider.directions(a, b, mode)
        except DirectionsError as e:
            log.warning("directions attempt (%s) failed: %s", mode.value, e)
            return None
        if route is None or not route.traversable:
            return None
        return route
