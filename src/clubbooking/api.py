from __future__ import annotations

from aws_lambda_powertools import Logger
from aws_lambda_powertools.metrics import Metrics, MetricUnit
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Depends, FastAPI, HTTPException, Query
from starlette.responses import Response

from clubbooking import bookings as booking_store
from clubbooking.exceptions import (
    BookingError,
    BookingOverlapError,
    BookingPermissionError,
    BookingStoreError,
    BookingValidationError,
)
from clubbooking.identity import get_identity
from clubbooking.models import (
    FLIGHT_TYPES,
    Booking,
    BookingCreate,
    BookingUpdate,
    BookingView,
    CalendarView,
    DraftRequest,
    Filter,
    Identity,
    Instructor,
    Resource,
)
from clubbooking.screen import BookingScreen

logger = Logger()
metrics = Metrics(namespace="ClubBooking")

app = FastAPI(title="Club Booking API", version="0.1.0")

BOOKING_NOT_FOUND = "Booking not found"
STORE_UNAVAILABLE = "Booking store unavailable"

_ERROR_STATUS: list[tuple[type[BookingError], int]] = [
    (BookingValidationError, 422),
    (BookingOverlapError, 409),
    (BookingPermissionError, 403),
    (BookingStoreError, 502),
]


def _http_error(exc: BookingError) -> HTTPException:
    status = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 400)
    return HTTPException(status_code=status, detail=str(exc))


def get_screen(identity: Identity = Depends(get_identity)) -> BookingScreen:
    return BookingScreen(identity)


def _load_bookings(screen: BookingScreen) -> None:
    # Overlap checks against an empty list would accept anything
    screen.refetch_bookings()
    if screen.bookings.error is not None:
        raise HTTPException(status_code=502, detail=STORE_UNAVAILABLE)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/resources", response_model=list[Resource], dependencies=[Depends(get_identity)])
def list_resources() -> list[Resource]:
    try:
        return booking_store.list_resources()
    except (ClientError, BotoCoreError) as exc:
        raise HTTPException(status_code=502, detail=STORE_UNAVAILABLE) from exc


@app.get("/instructors", response_model=list[Instructor], dependencies=[Depends(get_identity)])
def list_instructors() -> list[Instructor]:
    try:
        return booking_store.list_instructors()
    except (ClientError, BotoCoreError) as exc:
        raise HTTPException(status_code=502, detail=STORE_UNAVAILABLE) from exc


@app.get("/flight-types", response_model=list[str])
def list_flight_types() -> list[str]:
    return list(FLIGHT_TYPES)


@app.get("/bookings", response_model=list[Booking], dependencies=[Depends(get_identity)])
def list_bookings(profile_id: str | None = None, resource_id: str | None = None) -> list[Booking]:
    filters = [
        Filter(field=field, operator="eq", value=value)
        for field, value in (("profile_id", profile_id), ("resource_id", resource_id))
        if value is not None
    ]
    try:
        return booking_store.list_bookings(filters)
    except (ClientError, BotoCoreError) as exc:
        raise HTTPException(status_code=502, detail=STORE_UNAVAILABLE) from exc


@app.get("/bookings/{booking_id}", response_model=BookingView)
def show_booking(booking_id: str, screen: BookingScreen = Depends(get_screen)) -> BookingView:
    _load_bookings(screen)
    try:
        return screen.click_event(booking_id).view()
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=BOOKING_NOT_FOUND) from exc


@app.post("/bookings/draft", response_model=BookingView)
def draft_booking(payload: DraftRequest, screen: BookingScreen = Depends(get_screen)) -> BookingView:
    return screen.select_range(payload.resource_id, payload.start, payload.end).view()


@app.post("/bookings", response_model=Booking, status_code=201)
def create_booking(payload: BookingCreate, screen: BookingScreen = Depends(get_screen)) -> Booking:
    _load_bookings(screen)
    modal = screen.select_range(payload.resource_id, payload.start_time, payload.end_time)
    try:
        modal.apply(payload.model_dump(exclude={"resource_id", "start_time", "end_time"}, exclude_none=True))
        booking = modal.save()
    except BookingOverlapError as exc:
        metrics.add_metric(name="BookingConflict", value=1, unit=MetricUnit.Count)
        raise _http_error(exc) from exc
    except BookingError as exc:
        raise _http_error(exc) from exc

    metrics.add_metric(name="CreateBooking", value=1, unit=MetricUnit.Count)
    return booking


@app.put("/bookings/{booking_id}", response_model=Booking)
def update_booking(
    booking_id: str, payload: BookingUpdate, screen: BookingScreen = Depends(get_screen)
) -> Booking:
    _load_bookings(screen)
    try:
        modal = screen.click_event(booking_id)
        modal.apply({field: getattr(payload, field) for field in payload.model_fields_set})
        booking = modal.save()
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=BOOKING_NOT_FOUND) from exc
    except BookingOverlapError as exc:
        metrics.add_metric(name="BookingConflict", value=1, unit=MetricUnit.Count)
        raise _http_error(exc) from exc
    except BookingError as exc:
        raise _http_error(exc) from exc

    metrics.add_metric(name="UpdateBooking", value=1, unit=MetricUnit.Count)
    return booking


@app.delete("/bookings/{booking_id}")
def delete_booking(booking_id: str, screen: BookingScreen = Depends(get_screen)) -> Response:
    _load_bookings(screen)
    try:
        screen.click_event(booking_id).delete()
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=BOOKING_NOT_FOUND) from exc
    except BookingError as exc:
        raise _http_error(exc) from exc

    metrics.add_metric(name="DeleteBooking", value=1, unit=MetricUnit.Count)
    return Response(status_code=204)


@app.get("/calendar", response_model=CalendarView)
def calendar(
    resource_id: list[str] = Query(default=[]), screen: BookingScreen = Depends(get_screen)
) -> CalendarView:
    screen.load()
    if screen.bookings.error is not None:
        raise HTTPException(status_code=502, detail=STORE_UNAVAILABLE)
    screen.select_resources(resource_id)
    return screen.calendar()
