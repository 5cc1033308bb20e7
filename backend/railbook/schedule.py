"""Shuttle timetable simulation and train matching.

A fixed fleet of 15 trains shuttles between 台北 and 高雄, alternating
direction every leg. Each leg is a 210-minute run followed by a 30-minute
turnaround. Times are minutes from 00:00 of the travel date on a rolling
2-day clock, so values >= 1440 belong to the next day.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterator, Optional

from railbook.fares import base_fare, round_half_up
from railbook.models import TrainMatch
from railbook.stations import (
    NORTHBOUND,
    SOUTHBOUND,
    STATION_KM,
    leg_stations,
    require_station,
)

logger = logging.getLogger("railbook.schedule")

TRAIN_COUNT = 15
TRAIN_INTERVAL = 30  # minutes between consecutive train offsets
RUN_MINUTES = 210  # one full 台北-高雄 run
REST_MINUTES = 30  # turnaround at the terminus
MAX_LEGS = 6
HORIZON_MINUTES = 1440 * 2
SPEED_KM_PER_MIN = 360 / 210

NEXT_DAY_MARKER = "（隔日）"

_HHMM_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")


class InvalidDateTimeError(ValueError):
    """Date or time text could not be parsed."""


class PastDepartureError(ValueError):
    """Requested departure lies before the current time."""


@dataclass(frozen=True)
class Train:
    train_id: str
    offset_minutes: int  # departure of the first leg
    direction: str = SOUTHBOUND


def parse_hhmm(text: str) -> int:
    """Convert 'HH:MM' to minutes since midnight (0-1439)."""
    match = _HHMM_RE.fullmatch(text.strip()) if text else None
    if not match:
        raise InvalidDateTimeError(f"Expected HH:MM, got {text!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidDateTimeError(f"Time out of range: {text!r}")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Render minutes on the 2-day clock, e.g. 1500 -> '01:00（隔日）'."""
    time_in_day = minutes % 1440
    label = f"{time_in_day // 60:02d}:{time_in_day % 60:02d}"
    if minutes >= 1440:
        label += NEXT_DAY_MARKER
    return label


def travel_minutes(distance_km: float) -> int:
    return round_half_up(distance_km / SPEED_KM_PER_MIN)


def build_fleet() -> list[Train]:
    """All trains start southbound from 台北, one every TRAIN_INTERVAL minutes."""
    return [
        Train(train_id=f"T{100 + i}", offset_minutes=i * TRAIN_INTERVAL)
        for i in range(TRAIN_COUNT)
    ]


def _iter_legs(train: Train) -> Iterator[tuple[int, str, int]]:
    """Yield (loop, direction, leg_start) for each leg the train runs."""
    direction = train.direction
    leg_start = train.offset_minutes
    for loop in range(MAX_LEGS):
        yield loop, direction, leg_start
        leg_start += RUN_MINUTES + REST_MINUTES
        direction = NORTHBOUND if direction == SOUTHBOUND else SOUTHBOUND
        if leg_start > HORIZON_MINUTES:
            return


def _match_train(
    train: Train, origin: str, destination: str, requested_minutes: int
) -> Optional[tuple[int, int, int]]:
    """First (loop, depart, arrive) on which the train serves origin -> destination."""
    for loop, direction, leg_start in _iter_legs(train):
        stations = leg_stations(direction)
        head_km = STATION_KM[stations[0]]

        for i, station in enumerate(stations):
            arrive = leg_start + travel_minutes(abs(STATION_KM[station] - head_km))
            if arrive > HORIZON_MINUTES:
                break
            if station != origin or arrive < requested_minutes:
                continue
            if destination in stations[i + 1:]:
                dest_arrive = leg_start + travel_minutes(abs(STATION_KM[destination] - head_km))
                return loop, arrive, dest_arrive
    return None


def find_trains(
    origin: str,
    destination: str,
    travel_date: str,
    requested_time: str,
) -> list[TrainMatch]:
    """Trains leaving origin no earlier than requested_time and reaching destination.

    Each train contributes at most one match, taken from the first leg that
    serves the pair. Results are sorted by departure; ties keep fleet order.
    An empty list means no service, not an error.
    """
    origin = require_station(origin)
    destination = require_station(destination)
    requested_minutes = parse_hhmm(requested_time)
    price = base_fare(origin, destination)

    matches: list[TrainMatch] = []
    for train in build_fleet():
        found = _match_train(train, origin, destination, requested_minutes)
        if found is None:
            continue
        loop, depart, arrive = found
        depart_label = format_minutes(depart)
        arrive_label = format_minutes(arrive)
        matches.append(
            TrainMatch(
                train_id=train.train_id,
                depart_minutes=depart,
                arrive_minutes=arrive,
                origin=origin,
                destination=destination,
                date=travel_date,
                base_price=price,
                loop=loop,
                depart_label=depart_label,
                arrive_label=arrive_label,
                time_range=f"{depart_label} → {arrive_label}",
                pay_id=f"pay_{train.train_id}_{loop}",
                class_id=f"class_{train.train_id}_{loop}",
                price_id=f"price_{train.train_id}_{loop}",
            )
        )

    matches.sort(key=lambda m: m.depart_minutes)
    logger.debug(
        f"{origin}->{destination} {travel_date} {requested_time}: {len(matches)} trains"
    )
    return matches


def check_departure(date_text: str, time_text: str, now: datetime) -> datetime:
    """Parse a travel date and time and reject anything before the current minute.

    `now` supplies the timezone; the returned datetime carries the same tzinfo.
    """
    try:
        travel_day = date.fromisoformat(date_text)
    except (TypeError, ValueError) as e:
        raise InvalidDateTimeError(f"Expected YYYY-MM-DD, got {date_text!r}") from e
    minutes = parse_hhmm(time_text)

    departure = datetime.combine(
        travel_day, time(minutes // 60, minutes % 60), tzinfo=now.tzinfo
    )
    if departure < now.replace(second=0, microsecond=0):
        raise PastDepartureError(f"{departure.isoformat()} is in the past")
    return departure
