"""Exception types raised by macfleet."""

from __future__ import annotations

from enum import Enum


class MacfleetError(Exception):
    """Base class for macfleet errors."""


class AuthErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    CONNECTION_FAILED = "connection_failed"


class FetchErrorKind(str, Enum):
    INVALID_SCHEMA = "invalid_schema"
    UNAUTHORIZED = "unauthorized"
    CONNECTION_FAILED = "connection_failed"


class ScheduleErrorKind(str, Enum):
    MALFORMED = "malformed"
    INVALID_CALENDAR_DATE = "invalid_calendar_date"
    NOT_IN_FUTURE = "not_in_future"


class AuthError(MacfleetError):
    """Token acquisition or validation failed."""

    def __init__(self, kind: AuthErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class FetchError(MacfleetError):
    """A saved search could not be retrieved."""

    def __init__(
        self, kind: FetchErrorKind, message: str, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class ScheduleFormatError(MacfleetError, ValueError):
    """User supplied schedule text is not a usable timestamp."""

    def __init__(self, kind: ScheduleErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class InvalidVersionError(MacfleetError, ValueError):
    """Version string is not a dotted numeric version of up to three parts."""
