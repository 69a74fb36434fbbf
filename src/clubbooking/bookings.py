from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from aws_lambda_powertools import Logger

from . import store
from .models import Booking, Filter, Instructor, Resource

logger = Logger()

BOOKINGS = "bookings"
RESOURCES = "resources"
INSTRUCTORS = "instructors"
PROFILES = "profiles"

_TIME_FIELDS = ("start_time", "end_time", "created_at", "updated_at")
# Owner and creation time are fixed once a booking exists
_IMMUTABLE_FIELDS = ("id", "profile_id", "created_at")


def _dt_to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def _to_item(booking: Booking) -> dict[str, Any]:
    item = booking.model_dump(exclude={"id"})
    for key in _TIME_FIELDS:
        if item.get(key) is not None:
            item[key] = _dt_to_iso(item[key])
    return item


def _to_model(item: dict[str, Any]) -> Booking:
    return Booking.model_validate(item)


def _normalize_filter(flt: Filter) -> Filter:
    if isinstance(flt.value, datetime):
        return flt.model_copy(update={"value": _dt_to_iso(flt.value)})
    return flt


def list_bookings(filters: Iterable[Filter] | None = None) -> list[Booking]:
    records = store.list_records(BOOKINGS, [_normalize_filter(f) for f in filters or []])
    return [_to_model(it) for it in records.data]


def get_booking(booking_id: str) -> Booking:
    return _to_model(store.get_record(BOOKINGS, booking_id))


def create_booking(booking: Booking) -> Booking:
    now = datetime.now(UTC)
    values = _to_item(booking.model_copy(update={"id": None, "created_at": now, "updated_at": now}))
    record = store.create_record(BOOKINGS, values)
    logger.info("Created booking", extra={"booking_id": record["id"], "resource_id": booking.resource_id})
    return _to_model(record)


def update_booking(booking: Booking) -> Booking:
    if booking.id is None:
        raise ValueError("Cannot update a booking without an id")
    values = _to_item(booking.model_copy(update={"updated_at": datetime.now(UTC)}))
    for key in _IMMUTABLE_FIELDS:
        values.pop(key, None)
    record = store.update_record(BOOKINGS, booking.id, values)
    logger.info("Updated booking", extra={"booking_id": booking.id})
    return _to_model(record)


def delete_booking(booking_id: str) -> None:
    store.delete_record(BOOKINGS, booking_id)
    logger.info("Deleted booking", extra={"booking_id": booking_id})


def list_resources() -> list[Resource]:
    return [Resource.model_validate(it) for it in store.list_records(RESOURCES).data]


def profile_name(profile_id: str) -> str | None:
    try:
        profile = store.get_record(PROFILES, profile_id)
    except KeyError:
        return None
    name = " ".join(str(profile[k]) for k in ("first_name", "last_name") if profile.get(k))
    return name or None


def list_instructors() -> list[Instructor]:
    instructors = []
    for item in store.list_records(INSTRUCTORS).data:
        instructor = Instructor.model_validate(item)
        instructor.name = profile_name(instructor.profile_id) or instructor.id
        instructors.append(instructor)
    return instructors
