from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Generic, Literal, TypeVar, get_args

from pydantic import BaseModel, Field, field_validator, model_validator

FlightType = Literal["Private", "Commercial", "Cargo", "Training"]

FLIGHT_TYPES: tuple[str, ...] = get_args(FlightType)

Operator = Literal["eq", "ne", "lt", "lte", "gt", "gte", "in", "nin", "contains"]

T = TypeVar("T")


def _as_utc(value: datetime | None) -> datetime | None:
    # Naive timestamps are stored and compared as UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class Filter(BaseModel):
    field: str = Field(..., min_length=1)
    operator: Operator = "eq"
    value: Any = None

    @model_validator(mode="after")
    def _membership_needs_collection(self) -> Filter:
        # A string value would turn membership into a substring test
        if self.operator in ("in", "nin") and not isinstance(self.value, list | tuple | set | frozenset):
            raise ValueError(f"'{self.operator}' filters need a list of values")
        return self


class RecordList(BaseModel):
    data: list[dict[str, Any]]
    total: int


class Booking(BaseModel):
    id: str | None = None
    profile_id: str = Field(..., min_length=1)
    resource_id: str = Field(..., min_length=1)
    # Drafts may hold empty times; saving requires both
    start_time: datetime | None = None
    end_time: datetime | None = None
    title: str | None = None
    notes: str | None = None
    instructor_id: str | None = None
    flight_type: FlightType | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("start_time", "end_time", "created_at", "updated_at")
    @classmethod
    def _ensure_aware(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class BookingCreate(BaseModel):
    resource_id: str = Field(..., min_length=1)
    start_time: datetime | None = None
    end_time: datetime | None = None
    title: str | None = None
    notes: str | None = None
    instructor_id: str | None = None
    flight_type: FlightType | None = None


class BookingUpdate(BaseModel):
    resource_id: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    title: str | None = None
    notes: str | None = None
    instructor_id: str | None = None
    flight_type: FlightType | None = None


class DraftRequest(BaseModel):
    """A time range selected on one resource's calendar."""

    resource_id: str = Field(..., min_length=1)
    start: datetime
    end: datetime


class Resource(BaseModel):
    id: str
    name: str
    resource_type: Literal["aircraft", "simulator", "classroom"] | None = None
    status: Literal["available", "maintenance", "booked"] | None = None


class Instructor(BaseModel):
    id: str
    profile_id: str
    name: str | None = None
    rating_level: str | None = None
    availability: str | None = None


class Identity(BaseModel):
    id: str = Field(..., min_length=1)


class ListState(BaseModel, Generic[T]):
    data: list[T] = Field(default_factory=list)
    total: int = 0
    is_loading: bool = False
    error: str | None = None


class CalendarEvent(BaseModel):
    id: str
    title: str
    start: datetime
    end: datetime
    resource_id: str
    profile_id: str


class ResourceCalendar(BaseModel):
    resource_id: str
    name: str
    events: list[CalendarEvent]


class CalendarView(BaseModel):
    my_bookings: list[CalendarEvent]
    resources: list[ResourceCalendar]


class BookingView(BaseModel):
    mode: Literal["closed", "new", "editing", "viewing"]
    title: str
    editable: bool
    actions: list[str]
    booking: Booking | None = None
    start_input: str = ""
    end_input: str = ""
    error: str | None = None
