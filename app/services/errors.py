"""Domain errors raised by the ledger and catalog services.

Each error carries a stable code, a user-facing message and the HTTP status
the transport maps it to. Routers never build these responses by hand; the
handler registered in app.main renders them.
"""
from enum import Enum


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    EVENT_EXPIRED = "EVENT_EXPIRED"
    CROSS_EVENT_BATCH = "CROSS_EVENT_BATCH"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    LEDGER_BUSY = "LEDGER_BUSY"


class LedgerError(Exception):
    """Base domain error with code, user-safe message and HTTP status."""

    code: ErrorCode
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(LedgerError):
    """Event (or a participant of it) does not exist or was deleted."""

    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, message: str = "Event not found") -> None:
        super().__init__(message)


class AlreadyRegisteredError(LedgerError):
    code = ErrorCode.ALREADY_REGISTERED
    status_code = 409

    def __init__(self, event_id, email: str) -> None:
        super().__init__("You are already registered for this event")
        self.event_id = event_id
        self.email = email


class EventExpiredError(LedgerError):
    code = ErrorCode.EVENT_EXPIRED
    status_code = 410

    def __init__(self, event_id) -> None:
        super().__init__("Registration is closed: this event has already started")
        self.event_id = event_id


class CrossEventBatchError(LedgerError):
    code = ErrorCode.CROSS_EVENT_BATCH
    status_code = 400

    def __init__(self, foreign_ids: list) -> None:
        super().__init__("All participants in a batch must belong to the same event")
        self.foreign_ids = foreign_ids


class CapacityExceededError(LedgerError):
    code = ErrorCode.CAPACITY_EXCEEDED
    status_code = 409

    def __init__(self, message: str = "Not enough free places to confirm these participants") -> None:
        super().__init__(message)


class VersionConflictError(LedgerError):
    code = ErrorCode.VERSION_CONFLICT
    status_code = 409

    def __init__(self, expected: int, got: int) -> None:
        super().__init__(f"Version mismatch: expected {expected}, got {got}. Re-fetch and retry.")
        self.expected = expected
        self.got = got


class LedgerBusyError(LedgerError):
    """Per-event lock could not be taken in time. Transient, safe to retry."""

    code = ErrorCode.LEDGER_BUSY
    status_code = 503

    def __init__(self, event_id) -> None:
        super().__init__("Event is busy, please retry")
        self.event_id = event_id
