from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from clubbooking.exceptions import BookingValidationError
from clubbooking.timefields import format_for_input, parse_input

OSLO = ZoneInfo("Europe/Oslo")


def test_format_for_input_uses_local_minutes():
    value = datetime(2024, 6, 1, 10, 0, 59, tzinfo=UTC)
    assert format_for_input(value, OSLO) == "2024-06-01T12:00"


def test_format_for_input_accepts_iso_strings():
    assert format_for_input("2024-06-01T10:30:00+00:00", UTC) == "2024-06-01T10:30"


@pytest.mark.parametrize("value", [None, "", "not a date"])
def test_format_for_input_blank_on_bad_values(value):
    assert format_for_input(value, UTC) == ""


def test_parse_input_returns_utc():
    parsed = parse_input("2024-06-01T12:00", OSLO)
    assert parsed == datetime(2024, 6, 1, 10, 0, tzinfo=UTC)
    assert parsed is not None and parsed.tzinfo is UTC


def test_parse_then_format_keeps_local_value():
    assert format_for_input(parse_input("2024-12-24T08:15", OSLO), OSLO) == "2024-12-24T08:15"


@pytest.mark.parametrize("text", [None, "", "   "])
def test_parse_input_empty_is_none(text):
    assert parse_input(text, UTC) is None


def test_parse_input_rejects_malformed_text():
    with pytest.raises(BookingValidationError):
        parse_input("01/06/2024 10:00", UTC)
