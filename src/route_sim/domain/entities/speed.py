from enum import Enum


class TravelMode(Enum):
    # values double as OSRM profile names
    WALKING = "walking"
    DRIVING = "driving"


class Speed(Enum):
    # meters per second
    WALK = 1.2
    RUN = 2.8
    CYCLE = 8.0
    DRIVE = 16.0
    RACE = 27.0

    @property
    def mps(self) -> float:
        return self.value

    @property
    def kph(self) -> float:
        return self.value * 3.6

    def meters_per_tick(self, tick_interval_s: float) -> float:
        return self.value * tick_interval_s

    @property
    def travel_mode(self) -> TravelMode:
        return TravelMode.DRIVING if self.value >= Speed.DRIVE.value else TravelMode.WALKING

    @property
    def menu_index(self) -> int:
        return _MENU.index(self)

    @classmethod
    def from_menu_index(cls, index: int) -> "Speed":
        # unknown entries fall back to walking
        return _MENU[index] if 0 <= index < len(_MENU) else cls.WALK

    @classmethod
    def parse(cls, v: "Speed | str | float") -> "Speed":
        if isinstance(v, Speed):
            return v
        if isinstance(v, str):
            try:
                return cls[v.strip().upper()]
            except KeyError:
                raise ValueError(
                    f"Unknown speed {v!r}; expected one of {[s.name.lower() for s in cls]}"
                ) from None
        return cls(float(v))


_MENU = (Speed.WALK, Speed.RUN, Speed.CYCLE, Speed.DRIVE, Speed.RACE)
