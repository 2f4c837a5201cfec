import json
import os
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from route_sim.domain.entities.speed import Speed


class SimModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    tick_interval_s: float = Field(1.0, gt=0)
    # wall-time of t=0 for log/record stamps; None => now
    epoch: tuple[int, int, int, int, int, int] | None = None


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = Field(1, ge=1)


class TraversalModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    speed: Speed = Speed.WALK
    direct_route: bool = False  # skip directions, walk the straight line

    @field_validator("speed", mode="before")
    @classmethod
    def _parse_speed(cls, v):
        # accept "walk" / "Drive" / 16.0 as well as Speed members
        return Speed.parse(v)


# --------------------- Directions -------------------------


class DirectionsDirectModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["direct"] = "direct"


class DirectionsOsrmModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["osrm"] = "osrm"
    walking_url: str = "http://localhost:5001"
    driving_url: str = "http://localhost:5000"
    timeout_s: float = Field(60.0, gt=0)


DirectionsUnion = Annotated[
    DirectionsDirectModel | DirectionsOsrmModel,
    Field(discriminator="kind"),
]


class OutputModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    gpx_path: str | None = None  # "Simulated Location.gpx"
    location_path: str | None = None  # last known location (JSON)
    favorites_path: str | None = None  # saved places (JSON)
    speed_path: str | None = None  # preferred speed, overrides traversal.speed once saved
    jsonl: bool = False  # progress records on stdout


class ScenarioModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "route"
    run_id: str = "local"
    sim: SimModel = Field(default_factory=SimModel)
    log: LogModel = Field(default_factory=LogModel)
    traversal: TraversalModel = Field(default_factory=TraversalModel)
    directions: DirectionsUnion = Field(default_factory=DirectionsDirectModel)
    output: OutputModel = Field(default_factory=OutputModel)


def load_scenario(path: str | os.PathLike) -> ScenarioModel:
    with open(path, encoding="utf-8") as f:
        return ScenarioModel.model_validate(json.load(f))
