import math

from railbook.fares import base_fare, fare_table, round_half_up, seat_price
from railbook.models import SeatClass


def test_base_fare_matches_short_hop() -> None:
    assert base_fare("台北", "板橋") == 53
    assert base_fare("板橋", "台北") == 53


def test_base_fare_is_floor_of_distance_formula() -> None:
    assert base_fare("桃園", "台南") == math.floor(270 * 0.7 + 50)


def test_seat_class_multipliers() -> None:
    assert seat_price(53, SeatClass.ECONOMY) == 53
    assert seat_price(53, SeatClass.PREMIUM) == 69
    assert seat_price(53, SeatClass.VIP) == 90


def test_halves_round_up() -> None:
    assert round_half_up(84.5) == 85
    assert round_half_up(192.5) == 193
    assert round_half_up(68.9) == 69
    assert round_half_up(90.1) == 90


def test_fare_table_lists_every_class() -> None:
    quote = fare_table("台北", "板橋")
    assert quote.distance_km == 5
    assert quote.base_price == 53
    assert quote.prices == {"一般座": 53, "商務座": 69, "貴賓座": 90}
    assert quote.model_dump(by_alias=True)["from"] == "台北"
    assert "Line Pay" in quote.payment_methods
