from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from railbook.identity import normalize_id


class SeatClass(str, Enum):
    ECONOMY = "一般座"
    PREMIUM = "商務座"
    VIP = "貴賓座"


class Credentials(BaseModel):
    id: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("id")
    @classmethod
    def _normalize_id(cls, value: str) -> str:
        return normalize_id(value)

    @field_validator("password")
    @classmethod
    def _strip_password(cls, value: str) -> str:
        return value.strip()


class LoginResponse(BaseModel):
    success: bool = True
    id: str  # canonical form to send back as X-User-Id
    isAdmin: bool = False


class SuccessResponse(BaseModel):
    success: bool = True


class StationInfo(BaseModel):
    name: str
    km: int


class StationsResponse(BaseModel):
    stations: list[StationInfo]


class FareQuote(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    origin: str = Field(alias="from")
    destination: str = Field(alias="to")
    distance_km: int
    base_price: int
    prices: dict[str, int]  # seat class label -> price
    payment_methods: list[str] = Field(default_factory=list)


class DateTimeCheck(BaseModel):
    date: str  # YYYY-MM-DD
    time: str  # HH:MM


class ScheduleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    origin: str = Field(alias="from")
    destination: str = Field(alias="to")
    date: str
    time: str


class TrainMatch(BaseModel):
    """One bookable train between the requested stations.

    Serialized with camelCase keys (trainId, departMinutes, basePrice, ...).
    """
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    train_id: str
    depart_minutes: int  # minutes since 00:00 of the travel date, may exceed 1439
    arrive_minutes: int
    origin: str = Field(alias="from")
    destination: str = Field(alias="to")
    date: str
    base_price: int
    loop: int  # leg index the match was found on
    depart_label: str = ""
    arrive_label: str = ""
    time_range: str = ""
    pay_id: str = ""
    class_id: str = ""
    price_id: str = ""


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    origin: str = Field(alias="from")
    destination: str = Field(alias="to")
    date: str
    trains: list[TrainMatch] = Field(default_factory=list)


class Ticket(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    origin: str = Field(alias="from", min_length=1)
    destination: str = Field(alias="to", min_length=1)
    date: str = Field(min_length=1)
    time: str = Field(min_length=1)  # "HH:MM → HH:MM" as shown when booking
    price: int = Field(gt=0)
    pay: str = Field(min_length=1)
    seat_class: SeatClass = Field(alias="seatClass")


class TicketsResponse(BaseModel):
    tickets: list[Ticket]


class UserSummary(BaseModel):
    blocked: bool = False


class AllTicketsResponse(BaseModel):
    users: dict[str, UserSummary]
    tickets: dict[str, list[Ticket]]


class BlockUserRequest(BaseModel):
    id: Optional[str] = None
    action: Optional[str] = None  # "block" or "unblock"

    @field_validator("id")
    @classmethod
    def _normalize_id(cls, value: Optional[str]) -> Optional[str]:
        return normalize_id(value) if value is not None else None
