# sim/clock.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

TICK_S = 1.0  # default traversal cadence, one position per second


@dataclass(frozen=True)
class SimClock:
    epoch: datetime  # wall-time of scheduler t=0; tz-aware

    @classmethod
    def utc_epoch(cls, y: int, m: int, d: int, hh=0, mm=0, ss=0) -> SimClock:
        return cls(datetime(y, m, d, hh, mm, ss, tzinfo=UTC))

    @classmethod
    def utc_now(cls) -> SimClock:
        return cls(datetime.now(UTC).replace(microsecond=0))

    # wall -> scheduler seconds
    def to_sim(self, dt: datetime) -> float:
        delta = dt - self.epoch if dt.tzinfo else (dt.replace(tzinfo=UTC) - self.epoch)
        return delta.total_seconds()

    # scheduler seconds -> wall
    def to_wall(self, t: float) -> datetime:
        return self.epoch + timedelta(seconds=t)

    def iso(self, t: float) -> str:
        return self.to_wall(t).isoformat()
