import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import FileResponse

from railbook.models import (
    AllTicketsResponse,
    BlockUserRequest,
    Credentials,
    DateTimeCheck,
    FareQuote,
    LoginResponse,
    ScheduleRequest,
    ScheduleResponse,
    StationInfo,
    StationsResponse,
    SuccessResponse,
    Ticket,
    TicketsResponse,
    UserSummary,
)
from railbook.identity import normalize_id
from railbook.stations import STATION_KM, InvalidStationError, require_station

logger = logging.getLogger("railbook.routes")

# Tickets a user may hold at once; the 403 detail code names this cap
MAX_TICKETS = 5

# Handlers are async and call the store inline, so every read-modify-write of
# the JSON document runs on the event loop one request at a time.
router = APIRouter()
download_router = APIRouter()


def _get_state():
    from railbook.main import app_state
    return app_state


def _get_store():
    store = _get_state().get("store")
    if store is None:
        raise HTTPException(status_code=503, detail="Store not initialized")
    return store


def _get_settings():
    from railbook.config import load_settings

    return _get_state().get("settings") or load_settings()


async def current_user(x_user_id: Optional[str] = Header(None)) -> str:
    """Resolve the caller from the X-User-Id header."""
    user_id = normalize_id(x_user_id or "")
    if not user_id:
        raise HTTPException(status_code=401, detail="NO_USER_ID")
    user = _get_store().get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="NOT_FOUND")
    if user.get("blocked"):
        raise HTTPException(status_code=403, detail="BLOCKED")
    return user_id


async def admin_user(user_id: str = Depends(current_user)) -> str:
    if user_id != _get_settings().admin_id:
        raise HTTPException(status_code=403, detail="FORBIDDEN")
    return user_id


def _station_pair(origin: str, destination: str) -> tuple[str, str]:
    try:
        origin = require_station(origin)
        destination = require_station(destination)
    except InvalidStationError:
        raise HTTPException(status_code=400, detail="INVALID_STATION")
    if origin == destination:
        raise HTTPException(status_code=400, detail="SAME_STATION")
    return origin, destination


def _check_departure(date_text: str, time_text: str) -> None:
    from railbook.schedule import InvalidDateTimeError, PastDepartureError, check_departure

    try:
        check_departure(date_text, time_text, _get_settings().now())
    except PastDepartureError:
        raise HTTPException(status_code=400, detail="PAST_DATETIME")
    except InvalidDateTimeError:
        raise HTTPException(status_code=400, detail="INVALID_DATETIME")


def _parse_index(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="INVALID_INDEX")


@router.get("/health")
async def health():
    return {"status": "ok", "service": "Railbook API"}


@router.get("/stations", response_model=StationsResponse)
async def get_stations():
    """Stations in southbound order with their distance from 台北."""
    return StationsResponse(
        stations=[StationInfo(name=name, km=km) for name, km in STATION_KM.items()]
    )


@router.get("/fares", response_model=FareQuote)
async def get_fares(
    origin: str = Query(..., alias="from"),
    destination: str = Query(..., alias="to"),
):
    """Base fare and per-seat-class prices between two stations."""
    from railbook.fares import fare_table

    origin, destination = _station_pair(origin, destination)
    return fare_table(origin, destination)


# --- Accounts ---

@router.post("/register", response_model=SuccessResponse)
async def register(request: Credentials):
    from railbook.identity import is_strong_password, is_valid_id
    from railbook.store import UserExistsError

    if not is_valid_id(request.id):
        raise HTTPException(status_code=400, detail="INVALID_ID")
    if not is_strong_password(request.password):
        raise HTTPException(status_code=400, detail="WEAK_PASSWORD")

    try:
        _get_store().create_user(request.id, request.password)
    except UserExistsError:
        raise HTTPException(status_code=409, detail="EXISTS")
    return SuccessResponse()


@router.post("/login", response_model=LoginResponse)
async def login(request: Credentials):
    user = _get_store().get_user(request.id)
    if user is None:
        raise HTTPException(status_code=404, detail="NOT_FOUND")
    if user.get("blocked"):
        logger.info(f"Blocked user {request.id} tried to log in")
        raise HTTPException(status_code=403, detail="BLOCKED")
    if user.get("password") != request.password:
        raise HTTPException(status_code=401, detail="WRONG_PASSWORD")
    return LoginResponse(
        success=True,
        id=request.id,
        isAdmin=request.id == _get_settings().admin_id,
    )


# --- Schedule search ---

@router.post("/submit", response_model=SuccessResponse)
async def submit_datetime(request: DateTimeCheck):
    """Reject a travel date/time that cannot be parsed or already passed."""
    _check_departure(request.date, request.time)
    return SuccessResponse()


@router.post("/schedule", response_model=ScheduleResponse)
async def search_schedule(request: ScheduleRequest):
    """Trains from origin to destination leaving at or after the requested time."""
    from railbook.schedule import find_trains

    origin, destination = _station_pair(request.origin, request.destination)
    _check_departure(request.date, request.time)

    trains = find_trains(origin, destination, request.date, request.time)
    if not trains:
        logger.info(f"No service {origin}->{destination} on {request.date} after {request.time}")
    return ScheduleResponse(
        origin=origin,
        destination=destination,
        date=request.date,
        trains=trains,
    )


# --- Tickets ---

@router.get("/tickets", response_model=TicketsResponse)
async def get_tickets(user_id: str = Depends(current_user)):
    return {"tickets": _get_store().get_tickets(user_id)}


@router.post("/tickets", response_model=SuccessResponse)
async def book_ticket(ticket: Ticket, user_id: str = Depends(current_user)):
    from railbook.fares import base_fare, seat_price
    from railbook.store import UserNotFoundError

    origin, destination = _station_pair(ticket.origin, ticket.destination)
    if ticket.price != seat_price(base_fare(origin, destination), ticket.seat_class):
        raise HTTPException(status_code=400, detail="PRICE_MISMATCH")

    store = _get_store()
    if len(store.get_tickets(user_id)) >= MAX_TICKETS:
        raise HTTPException(status_code=403, detail="MAX_5_TICKETS")

    ticket = ticket.model_copy(update={"origin": origin, "destination": destination})
    try:
        store.add_ticket(user_id, ticket.model_dump(mode="json", by_alias=True))
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="NOT_FOUND_USER")
    return SuccessResponse()


def _remove_ticket(user_id: str, raw_index: str) -> None:
    from railbook.store import TicketIndexError, UserNotFoundError

    index = _parse_index(raw_index)
    try:
        _get_store().remove_ticket(user_id, index)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="NOT_FOUND_USER")
    except TicketIndexError:
        raise HTTPException(status_code=400, detail="INDEX_INVALID")


@router.delete("/tickets/{index}", response_model=SuccessResponse)
async def delete_ticket(index: str, user_id: str = Depends(current_user)):
    """Cancel a ticket, or drop it after it has been picked up."""
    _remove_ticket(user_id, index)
    return SuccessResponse()


# --- Admin ---

@router.get("/allTickets", response_model=AllTicketsResponse)
async def get_all_tickets(admin_id: str = Depends(admin_user)):
    """Every user with their block state, and every user's tickets."""
    data = _get_store().get_all()
    return AllTicketsResponse(
        users={
            uid: UserSummary(blocked=bool(info.get("blocked")))
            for uid, info in data["users"].items()
        },
        tickets={uid: data["tickets"].get(uid) or [] for uid in data["users"]},
    )


@router.post("/blockUser", response_model=SuccessResponse)
async def block_user(request: BlockUserRequest, admin_id: str = Depends(admin_user)):
    from railbook.store import UserNotFoundError

    if request.id == admin_id:
        raise HTTPException(status_code=403, detail="CANNOT_BLOCK_SELF")
    if not request.id or not request.action:
        raise HTTPException(status_code=400, detail="MISSING_FIELDS")

    store = _get_store()
    try:
        if request.action == "block":
            store.block_user(request.id)
        elif request.action == "unblock":
            store.unblock_user(request.id)
        else:
            raise HTTPException(status_code=400, detail="INVALID_ACTION")
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="NOT_FOUND_USER")
    return SuccessResponse()


@router.delete("/admin/tickets/{user_id}/{index}", response_model=SuccessResponse)
async def admin_delete_ticket(user_id: str, index: str, admin_id: str = Depends(admin_user)):
    """Delete any user's ticket by position."""
    user_id = normalize_id(user_id)
    _remove_ticket(user_id, index)
    logger.info(f"Admin {admin_id} deleted ticket #{index} of {user_id}")
    return SuccessResponse()


@download_router.get("/download")
async def download_db(token: Optional[str] = Query(None)):
    """Export the raw JSON document. Needs ?token= matching ADMIN_TOKEN."""
    settings = _get_settings()
    if not settings.admin_token or not token or not secrets.compare_digest(
        token.encode(), settings.admin_token.encode()
    ):
        logger.warning("Rejected /download request with a bad or missing token")
        raise HTTPException(status_code=403, detail="FORBIDDEN")

    path = settings.db_path
    if not path.exists():
        raise HTTPException(status_code=404, detail="NOT_FOUND")
    return FileResponse(path, media_type="application/json", filename="db.json")
