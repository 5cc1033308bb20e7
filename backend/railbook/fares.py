import math

from railbook.models import FareQuote, SeatClass
from railbook.stations import distance_between


# Fare constants (NT$)
BASE_FARE = 50
FARE_PER_KM = 0.7

# Seat class multipliers applied on top of the base fare
SEAT_CLASS_MULTIPLIER = {
    SeatClass.ECONOMY: 1.0,
    SeatClass.PREMIUM: 1.3,
    SeatClass.VIP: 1.7,
}

PAYMENT_METHODS = [
    "Line Pay",
    "Apple Pay",
    "信用卡",
    "街口支付",
    "支付寶",
    "微信支付",
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (192.5 -> 193)."""
    return math.floor(value + 0.5)


def base_fare(origin: str, destination: str) -> int:
    """Distance-proportional fare before the seat class multiplier."""
    return math.floor(distance_between(origin, destination) * FARE_PER_KM + BASE_FARE)


def seat_price(base: int, seat_class: SeatClass) -> int:
    """Price for a seat class. Economy pays the base fare unchanged."""
    if seat_class == SeatClass.ECONOMY:
        return base
    return round_half_up(base * SEAT_CLASS_MULTIPLIER[seat_class])


def fare_table(origin: str, destination: str) -> FareQuote:
    """Base fare plus the price of every seat class between two stations."""
    base = base_fare(origin, destination)
    return FareQuote(
        origin=origin,
        destination=destination,
        distance_km=distance_between(origin, destination),
        base_price=base,
        prices={seat_class.value: seat_price(base, seat_class) for seat_class in SeatClass},
        payment_methods=list(PAYMENT_METHODS),
    )
