# runtime/registries.py
from collections.abc import Callable
from typing import Any

from route_sim.app.protocols import DirectionsProvider
from route_sim.config.models import DirectionsDirectModel, DirectionsOsrmModel, DirectionsUnion
from route_sim.domain.entities.speed import TravelMode
from route_sim.services.directions import DirectRouteProvider, OsrmDirectionsProvider

DirectionsFactory = Callable[[DirectionsUnion, dict[str, Any]], DirectionsProvider]

_directions_registry: dict[str, DirectionsFactory] = {}


# ------------------- Directions providers ---------------------------


def register_directions(kind: str):
    def deco(fn: DirectionsFactory):
        _directions_registry[kind] = fn
        return fn

    return deco


def make_directions(cfg: DirectionsUnion, *, deps: dict | None = None) -> DirectionsProvider:
    try:
        factory = _directions_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown directions kind {cfg.kind!r}") from None
    return factory(cfg, deps or {})


@register_directions("direct")
def _make_direct(cfg: DirectionsDirectModel, deps):
    return DirectRouteProvider()


@register_directions("osrm")
def _make_osrm(cfg: DirectionsOsrmModel, deps):
    return OsrmDirectionsProvider(
        {TravelMode.WALKING: cfg.walking_url, TravelMode.DRIVING: cfg.driving_url},
        timeout_s=cfg.timeout_s,
        session=deps.get("session"),
    )
