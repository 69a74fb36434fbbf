from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from . import bookings as booking_store
from .models import Booking, CalendarView, Identity, Instructor, ListState, Resource
from .modal import BookingModal
from .projector import project

logger = Logger()


class BookingScreen:
    """In-memory state behind the resource booking calendar for one member."""

    def __init__(self, identity: Identity) -> None:
        self.identity = identity
        self.bookings: ListState[Booking] = ListState[Booking]()
        self.resources: ListState[Resource] = ListState[Resource]()
        self.instructors: ListState[Instructor] = ListState[Instructor]()
        self.selected_resource_ids: list[str] = []
        self.modal = BookingModal(identity, bookings=lambda: self.bookings.data, refetch=self.refetch_bookings)

    def _fill(self, name: str, state: ListState[Any], fetch: Callable[[], list[Any]]) -> None:
        state.is_loading = True
        state.error = None
        try:
            data = fetch()
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Error fetching list", extra={"list": name})
            state.error = str(exc)
        else:
            state.data = data
            state.total = len(data)
        finally:
            state.is_loading = False

    def load(self) -> None:
        # Lists load independently so one failure does not blank the others
        jobs: list[tuple[str, ListState[Any], Callable[[], list[Any]]]] = [
            ("bookings", self.bookings, booking_store.list_bookings),
            ("resources", self.resources, booking_store.list_resources),
            ("instructors", self.instructors, booking_store.list_instructors),
        ]
        with ThreadPoolExecutor(max_workers=len(jobs)) as pool:
            futures = [pool.submit(self._fill, *job) for job in jobs]
        for future in futures:
            future.result()

    def refetch_bookings(self) -> list[Booking]:
        self._fill("bookings", self.bookings, booking_store.list_bookings)
        return self.bookings.data

    def select_resources(self, resource_ids: Sequence[str]) -> None:
        # Keep selection order, drop repeats
        self.selected_resource_ids = list(dict.fromkeys(resource_ids))

    def select_range(self, resource_id: str, start: datetime | None, end: datetime | None) -> BookingModal:
        self.modal.open_new(resource_id, start, end)
        return self.modal

    def click_event(self, booking_id: str) -> BookingModal:
        booking = next((b for b in self.bookings.data if b.id == booking_id), None)
        if booking is None:
            raise KeyError("Booking not found")
        self.modal.open_existing(booking)
        return self.modal

    def calendar(self) -> CalendarView:
        return project(
            self.bookings.data,
            self.identity.id,
            self.selected_resource_ids,
            self.resources.data,
        )
