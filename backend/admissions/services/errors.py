"""Domain error codes for registration admission and favorites.

Services raise these; the HTTP layer maps ``code`` to a status. Each error
also carries a ``kind`` so callers can tell a validation failure from a
benign duplicate, a missing record, or storage contention worth retrying.
"""
from enum import Enum


class ErrorCode(str, Enum):
    """Domain error codes."""

    INVALID_GUEST_COUNT = "INVALID_GUEST_COUNT"
    INVALID_ITEM_TYPE = "INVALID_ITEM_TYPE"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_CLOSED = "EVENT_CLOSED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    NOT_REGISTERED = "NOT_REGISTERED"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    CHECK_IN_NOT_OPEN = "CHECK_IN_NOT_OPEN"
    ALREADY_FAVORITED = "ALREADY_FAVORITED"
    NOT_FAVORITED = "NOT_FAVORITED"
    CONFLICT = "CONFLICT"


class ErrorKind(str, Enum):
    validation = "validation"
    conflict = "conflict"
    not_found = "not_found"
    transient = "transient"


class LedgerError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.CONFLICT
    kind: ErrorKind = ErrorKind.conflict
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidGuestCountError(LedgerError):
    code = ErrorCode.INVALID_GUEST_COUNT
    kind = ErrorKind.validation

    def __init__(self, guest_count: int) -> None:
        super().__init__(f"Guest count must be at least 1, got {guest_count}")
        self.guest_count = guest_count


class InvalidItemTypeError(LedgerError):
    code = ErrorCode.INVALID_ITEM_TYPE
    kind = ErrorKind.validation

    def __init__(self, item_type: str) -> None:
        super().__init__(f"Unknown item type: {item_type}")
        self.item_type = item_type


class EventNotFoundError(LedgerError):
    code = ErrorCode.EVENT_NOT_FOUND
    kind = ErrorKind.not_found

    def __init__(self, event_id: str) -> None:
        super().__init__("Event not found")
        self.event_id = event_id


class EventClosedError(LedgerError):
    """Raised when an event has ended, was cancelled, or is completed."""

    code = ErrorCode.EVENT_CLOSED

    def __init__(self, event_id: str) -> None:
        super().__init__("Event is no longer accepting registrations")
        self.event_id = event_id


class AlreadyRegisteredError(LedgerError):
    code = ErrorCode.ALREADY_REGISTERED

    def __init__(self, user_id: str, event_id: str) -> None:
        super().__init__("You have already RSVPed for this event")
        self.user_id = user_id
        self.event_id = event_id


class NotRegisteredError(LedgerError):
    code = ErrorCode.NOT_REGISTERED
    kind = ErrorKind.not_found

    def __init__(self, user_id: str, event_id: str) -> None:
        super().__init__("RSVP not found")
        self.user_id = user_id
        self.event_id = event_id


class AlreadyCheckedInError(LedgerError):
    code = ErrorCode.ALREADY_CHECKED_IN

    def __init__(self, registration_id: str) -> None:
        super().__init__("Registration is already checked in")
        self.registration_id = registration_id


class CheckInNotOpenError(LedgerError):
    code = ErrorCode.CHECK_IN_NOT_OPEN

    def __init__(self, event_id: str) -> None:
        super().__init__("Check-in opens when the event starts")
        self.event_id = event_id


class AlreadyFavoritedError(LedgerError):
    code = ErrorCode.ALREADY_FAVORITED

    def __init__(self, item_type: str, item_id: str) -> None:
        super().__init__(f"{item_type.capitalize()} already in favorites")
        self.item_type = item_type
        self.item_id = item_id


class NotFavoritedError(LedgerError):
    code = ErrorCode.NOT_FAVORITED
    kind = ErrorKind.not_found

    def __init__(self, item_type: str, item_id: str) -> None:
        super().__init__(f"{item_type.capitalize()} is not in favorites")
        self.item_type = item_type
        self.item_id = item_id


class ConflictError(LedgerError):
    """Storage contention outlasted the retry budget; safe to retry the whole request."""

    code = ErrorCode.CONFLICT
    kind = ErrorKind.transient
    retryable = True

    def __init__(self, key: str, attempts: int) -> None:
        super().__init__(f"Too much contention on {key}; retry the request")
        self.key = key
        self.attempts = attempts
