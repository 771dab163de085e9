"""Failure values returned by the timezone client instead of raising."""
from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Stable tags for every way a lookup can fail."""
    INVALID_LATITUDE = "invalid_latitude"
    INVALID_LONGITUDE = "invalid_longitude"
    API_TRANSPORT_ERROR = "api_transport_error"
    API_STATUS_ERROR = "api_status_error"
    API_PARSE_ERROR = "api_parse_error"
    API_LOGIC_ERROR = "api_logic_error"


@dataclass(frozen=True)
class TimezoneFailure:
    """A failed lookup: what went wrong and a message safe to show a user."""
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


class TimezoneProviderError(Exception):
    """Exception raised inside the client when the timezone API call fails."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def to_failure(self) -> TimezoneFailure:
        return TimezoneFailure(kind=self.kind, message=self.message)


def is_failure(result) -> bool:
    """True if a lookup result is a failure rather than a response."""
    return isinstance(result, TimezoneFailure)
