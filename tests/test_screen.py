from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from clubbooking import bookings
from clubbooking.modal import ModalMode
from clubbooking.models import Booking, Identity
from clubbooking.screen import BookingScreen
from conftest import FakeTable

START = datetime(2024, 6, 1, 10, 0, tzinfo=UTC)
END = datetime(2024, 6, 1, 11, 0, tzinfo=UTC)


@pytest.fixture()
def seeded(fake_tables: dict[str, FakeTable]) -> dict[str, Booking]:
    fake_tables["resources"].items["R1"] = {"id": "R1", "name": "SE-ABC"}
    fake_tables["resources"].items["R2"] = {"id": "R2", "name": "SE-XYZ"}
    return {
        "mine": bookings.create_booking(Booking(profile_id="U1", resource_id="R1", start_time=START, end_time=END)),
        "theirs": bookings.create_booking(
            Booking(profile_id="U2", resource_id="R2", start_time=START, end_time=END)
        ),
    }


def test_load_fills_every_list(seeded: dict[str, Booking]):
    screen = BookingScreen(Identity(id="U1"))
    screen.load()
    assert screen.bookings.total == 2  # noqa: PLR2004
    assert {r.name for r in screen.resources.data} == {"SE-ABC", "SE-XYZ"}
    assert screen.instructors.data == []
    assert not any(s.is_loading for s in (screen.bookings, screen.resources, screen.instructors))


def test_failed_list_does_not_blank_the_others(seeded: dict[str, Booking]):
    failure = ClientError({"Error": {"Code": "ResourceNotFoundException", "Message": "gone"}}, "Scan")
    screen = BookingScreen(Identity(id="U1"))
    with patch("clubbooking.screen.booking_store.list_resources", side_effect=failure):
        screen.load()
    assert screen.resources.error is not None
    assert screen.resources.data == []
    assert screen.bookings.error is None
    assert screen.bookings.total == 2  # noqa: PLR2004


def test_click_event_gates_by_owner(seeded: dict[str, Booking]):
    screen = BookingScreen(Identity(id="U1"))
    screen.refetch_bookings()
    assert screen.click_event(seeded["mine"].id).mode is ModalMode.EDITING  # type: ignore[arg-type]
    screen.modal.close()
    assert screen.click_event(seeded["theirs"].id).mode is ModalMode.VIEWING  # type: ignore[arg-type]


def test_click_unknown_event_raises(seeded: dict[str, Booking]):
    screen = BookingScreen(Identity(id="U1"))
    screen.refetch_bookings()
    with pytest.raises(KeyError):
        screen.click_event("nope")


def test_save_refreshes_collection_and_calendar(seeded: dict[str, Booking]):
    screen = BookingScreen(Identity(id="U1"))
    screen.load()
    screen.select_resources(["R2", "R1", "R2"])
    assert screen.selected_resource_ids == ["R2", "R1"]

    modal = screen.select_range("R2", END, END.replace(hour=12))
    modal.save()

    assert screen.bookings.total == 3  # noqa: PLR2004
    view = screen.calendar()
    assert len(view.my_bookings) == 2  # noqa: PLR2004
    assert [c.name for c in view.resources] == ["SE-XYZ", "SE-ABC"]
    assert len(view.resources[0].events) == 2  # noqa: PLR2004
