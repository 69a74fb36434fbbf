from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import Booking, CalendarEvent, CalendarView, Resource, ResourceCalendar

DEFAULT_EVENT_TITLE = "Booking"


def to_event(booking: Booking) -> CalendarEvent | None:
    # Unsaved or timeless bookings have nothing to render or dispatch clicks to
    if booking.id is None or booking.start_time is None or booking.end_time is None:
        return None
    return CalendarEvent(
        id=booking.id,
        title=booking.title or DEFAULT_EVENT_TITLE,
        start=booking.start_time,
        end=booking.end_time,
        resource_id=booking.resource_id,
        profile_id=booking.profile_id,
    )


def _events(bookings: Iterable[Booking]) -> list[CalendarEvent]:
    return [event for event in map(to_event, bookings) if event is not None]


def project(
    bookings: Sequence[Booking],
    identity_id: str,
    selected_resource_ids: Sequence[str],
    resources: Iterable[Resource] = (),
) -> CalendarView:
    names = {r.id: r.name for r in resources}
    return CalendarView(
        my_bookings=_events(b for b in bookings if b.profile_id == identity_id),
        resources=[
            ResourceCalendar(
                resource_id=resource_id,
                name=names.get(resource_id, resource_id),
                events=_events(b for b in bookings if b.resource_id == resource_id),
            )
            for resource_id in selected_resource_ids
        ],
    )
