from __future__ import annotations

import os
from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo

from .exceptions import BookingValidationError

INPUT_FORMAT = "%Y-%m-%dT%H:%M"

_CLUB_TIMEZONE = os.environ.get("CLUB_TIMEZONE", "UTC")


def club_timezone() -> tzinfo:
    return ZoneInfo(_CLUB_TIMEZONE)


def format_for_input(value: datetime | str | None, tz: tzinfo | None = None) -> str:
    """Render a timestamp as a local, minute-granularity input value.

    Empty or unparseable values render as an empty field.
    """
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(tz or club_timezone()).strftime(INPUT_FORMAT)


def parse_input(text: str | None, tz: tzinfo | None = None) -> datetime | None:
    """Read a local input value back into a UTC timestamp."""
    if text is None or not text.strip():
        return None
    try:
        local = datetime.strptime(text.strip(), INPUT_FORMAT)
    except ValueError as exc:
        raise BookingValidationError(f"Invalid time value: {text!r}") from exc
    return local.replace(tzinfo=tz or club_timezone()).astimezone(UTC)
