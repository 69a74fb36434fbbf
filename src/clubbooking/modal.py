"""Booking modal: create, view, edit and delete a single booking.

The modal holds a local copy of one booking. Field edits only touch that copy;
``save`` and ``delete`` are the only transitions that reach the store, and both
refetch the booking collection before closing. Any failure leaves the modal
open with ``error`` set.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from enum import Enum
from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from . import bookings as booking_store
from .exceptions import (
    BookingError,
    BookingOverlapError,
    BookingPermissionError,
    BookingStoreError,
    BookingValidationError,
)
from .models import Booking, BookingView, Identity
from .overlap import find_conflicts
from .timefields import format_for_input, parse_input

logger = Logger()

EDITABLE_FIELDS = frozenset(
    {"resource_id", "start_time", "end_time", "title", "notes", "instructor_id", "flight_type"}
)
TIME_FIELDS = ("start_time", "end_time")

REQUIRED_TIMES_MESSAGE = "Start and End times are required."
INVERTED_RANGE_MESSAGE = "End time cannot be before start time."
OVERLAP_MESSAGE = "Booking times overlap with an existing booking. Please choose a different time."


class ModalMode(str, Enum):
    CLOSED = "closed"
    NEW = "new"
    EDITING = "editing"
    VIEWING = "viewing"


_TITLES = {
    ModalMode.CLOSED: "",
    ModalMode.NEW: "New Booking",
    ModalMode.EDITING: "Edit Booking",
    ModalMode.VIEWING: "View Booking",
}


class BookingModal:
    def __init__(
        self,
        identity: Identity,
        bookings: Callable[[], Sequence[Booking]],
        refetch: Callable[[], Any],
    ) -> None:
        self.identity = identity
        self._bookings = bookings
        self._refetch = refetch
        self.mode = ModalMode.CLOSED
        self.booking: Booking | None = None
        self.error: str | None = None

    @property
    def is_open(self) -> bool:
        return self.mode is not ModalMode.CLOSED

    @property
    def is_editable(self) -> bool:
        return self.mode in (ModalMode.NEW, ModalMode.EDITING)

    @property
    def actions(self) -> list[str]:
        if self.mode is ModalMode.NEW:
            return ["save", "cancel"]
        if self.mode is ModalMode.EDITING:
            return ["save", "delete", "cancel"]
        if self.mode is ModalMode.VIEWING:
            return ["close"]
        return []

    def view(self) -> BookingView:
        booking = self.booking
        return BookingView(
            mode=self.mode.value,
            title=_TITLES[self.mode],
            editable=self.is_editable,
            actions=self.actions,
            booking=booking,
            start_input=format_for_input(booking.start_time) if booking else "",
            end_input=format_for_input(booking.end_time) if booking else "",
            error=self.error,
        )

    def open_new(self, resource_id: str, start: datetime | None, end: datetime | None) -> None:
        self.booking = Booking(
            profile_id=self.identity.id,
            resource_id=resource_id,
            start_time=start,
            end_time=end,
        )
        self.mode = ModalMode.NEW
        self.error = None

    def open_existing(self, booking: Booking) -> None:
        self.booking = booking.model_copy()
        self.mode = ModalMode.EDITING if booking.profile_id == self.identity.id else ModalMode.VIEWING
        self.error = None

    def close(self) -> None:
        self.mode = ModalMode.CLOSED
        self.booking = None
        self.error = None

    def _require_editable(self) -> Booking:
        if not self.is_editable or self.booking is None:
            raise BookingPermissionError("Booking is read-only")
        return self.booking

    def set_field(self, field: str, value: Any) -> None:
        booking = self._require_editable()
        if field not in EDITABLE_FIELDS:
            raise BookingValidationError(f"Field is not editable: {field}")
        if value == "":
            value = None
        try:
            self.booking = Booking.model_validate({**booking.model_dump(), field: value})
        except ValidationError as exc:
            raise BookingValidationError(f"Invalid value for {field}") from exc

    def set_time(self, field: str, local_text: str | None) -> None:
        if field not in TIME_FIELDS:
            raise BookingValidationError(f"Not a time field: {field}")
        self.set_field(field, parse_input(local_text))

    def apply(self, values: dict[str, Any]) -> None:
        for field, value in values.items():
            self.set_field(field, value)

    def _validate(self, booking: Booking) -> None:
        if booking.start_time is None or booking.end_time is None:
            raise BookingValidationError(REQUIRED_TIMES_MESSAGE)
        if booking.end_time < booking.start_time:
            raise BookingValidationError(INVERTED_RANGE_MESSAGE)
        conflicts = find_conflicts(booking, self._bookings())
        if conflicts:
            raise BookingOverlapError(OVERLAP_MESSAGE, [c.id for c in conflicts if c.id])

    def save(self) -> Booking:
        booking = self._require_editable()
        try:
            self._validate(booking)
        except BookingOverlapError as exc:
            logger.warning(
                "Rejected overlapping booking",
                extra={"resource_id": booking.resource_id, "conflicts": exc.conflicts},
            )
            self.error = str(exc)
            raise
        except BookingError as exc:
            self.error = str(exc)
            raise

        try:
            if booking.id is None:
                saved = booking_store.create_booking(booking)
            else:
                saved = booking_store.update_booking(booking)
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Error saving booking", extra={"booking_id": booking.id})
            self.error = "Could not save booking."
            raise BookingStoreError(self.error) from exc

        self._refetch()
        self.close()
        return saved

    def delete(self) -> None:
        if self.mode is not ModalMode.EDITING or self.booking is None or self.booking.id is None:
            raise BookingPermissionError("Only your own saved bookings can be deleted")
        booking_id = self.booking.id
        try:
            booking_store.delete_booking(booking_id)
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Error deleting booking", extra={"booking_id": booking_id})
            self.error = "Could not delete booking."
            raise BookingStoreError(self.error) from exc

        self._refetch()
        self.close()
