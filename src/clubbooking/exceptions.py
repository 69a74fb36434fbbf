from __future__ import annotations


class BookingError(Exception):
    """Base class for failures that end a booking action."""


class BookingValidationError(BookingError):
    pass


class BookingOverlapError(BookingError):
    def __init__(self, message: str, conflicts: list[str] | None = None) -> None:
        super().__init__(message)
        self.conflicts = conflicts or []


class BookingPermissionError(BookingError):
    pass


class BookingStoreError(BookingError):
    pass
