"""Hardcoded station table for the 台北-高雄 line.

Distances are kilometres from the 台北 terminus, listed in southbound order.
Every schedule and fare computation reads from this table.
"""

SOUTHBOUND = "south"
NORTHBOUND = "north"

# Station name -> km from 台北 (canonical southbound order)
STATION_KM: dict[str, int] = {
    "台北": 0,
    "板橋": 5,
    "桃園": 30,
    "新竹": 70,
    "台中": 140,
    "嘉義": 220,
    "台南": 300,
    "高雄": 360,
}

STATIONS: list[str] = list(STATION_KM)

# Aliases for input that arrives with the traditional 臺 character
_STATION_ALIASES: dict[str, str] = {
    "臺北": "台北",
    "臺中": "台中",
    "臺南": "台南",
}


class InvalidStationError(ValueError):
    """Raised when a station name is not on the line."""

    def __init__(self, name: str):
        super().__init__(f"Unknown station: {name!r}")
        self.name = name


def require_station(name: str) -> str:
    """Return the canonical station name, or raise InvalidStationError."""
    if name in STATION_KM:
        return name
    canonical = _STATION_ALIASES.get(name)
    if canonical:
        return canonical
    raise InvalidStationError(name)


def station_km(name: str) -> int:
    return STATION_KM[require_station(name)]


def leg_stations(direction: str) -> list[str]:
    """Stations in travel order for one leg in the given direction."""
    if direction == SOUTHBOUND:
        return list(STATIONS)
    return list(reversed(STATIONS))


def distance_between(origin: str, destination: str) -> int:
    """Track distance in km between two stations."""
    return abs(station_km(origin) - station_km(destination))
