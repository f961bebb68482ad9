"""
Domain errors raised by the scheduling core.

Every error is synchronous and local: it is raised to the immediate caller and
mapped to an HTTP response by ``app.base.error_handlers``. Nothing here is
retried automatically.
"""

from typing import Any, Dict, Optional


class SchedulingError(Exception):
    """Base class for all scheduling domain errors."""

    status_code: int = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


# === Caller-fixable input errors ===

class ValidationError(SchedulingError):
    """Missing or invalid input field."""


class PastSchedule(SchedulingError):
    """Requested start is not later than now plus the booking buffer."""


class PastDate(PastSchedule):
    pass


class PastTime(PastSchedule):
    pass


class Forbidden(SchedulingError):
    status_code = 403


# === Lookup errors ===

class NotFound(SchedulingError):
    status_code = 404


class SlotNotFound(NotFound):
    pass


class BookingNotFound(NotFound):
    pass


# === Allocation conflicts ===

class ConflictError(SchedulingError):
    status_code = 409


class SlotTaken(ConflictError):
    pass


class SlotInUse(ConflictError):
    pass


class SlotCurrentlyBooked(ConflictError):
    pass


class DuplicateSlot(ConflictError):
    pass


class DuplicateBooking(ConflictError):
    pass


class AlreadyBooked(ConflictError):
    pass


class AlreadyFree(ConflictError):
    pass


class InvalidTransition(ConflictError):
    pass


# === Infrastructure ===

class StorageFailure(SchedulingError):
    status_code = 503
