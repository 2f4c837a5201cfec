# route_sim/io/records.py

from dataclasses import dataclass


# Base type for progress records (fanned out to sinks, never scheduled)
@dataclass
class TraversalRecord:
    run_id: str
    t: float  # scheduler time
    seq: int  # emission order within the run
    name: str  # stable record name


@dataclass
class PositionRecord(TraversalRecord):
    lat: float
    lon: float
    heading_deg: float | None = None
    remaining: int | None = None  # waypoints still queued


@dataclass
class CompletedRecord(TraversalRecord):
    ticks: int
    lat: float | None = None
    lon: float | None = None
