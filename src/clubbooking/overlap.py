"""Half-open interval overlap checks for bookings on the same resource."""

from __future__ import annotations

from collections.abc import Iterable

from .models import Booking


def overlaps(a: Booking, b: Booking) -> bool:
    """Return True when ``a`` and ``b`` reserve the same resource at a shared instant.

    Intervals are ``[start_time, end_time)``, so a booking ending exactly when
    another starts does not overlap it. A saved booking never overlaps itself,
    and bookings without both times never overlap anything.
    """
    if a.resource_id != b.resource_id:
        return False
    if a.id is not None and a.id == b.id:
        return False
    if a.start_time is None or a.end_time is None or b.start_time is None or b.end_time is None:
        return False
    return a.start_time < b.end_time and a.end_time > b.start_time


def find_conflicts(candidate: Booking, bookings: Iterable[Booking]) -> list[Booking]:
    return [existing for existing in bookings if overlaps(candidate, existing)]


def is_overlapping(candidate: Booking, bookings: Iterable[Booking]) -> bool:
    return any(overlaps(candidate, existing) for existing in bookings)
