"""
Domain error taxonomy.

Services raise these; the API layer maps them to HTTP responses through a
single exception handler registered in ``app.main``.
"""
from typing import Optional


class ServiceError(Exception):
    """Base class for all errors raised by the reservation and schedule services."""

    status_code = 500
    code = "service_error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.__class__.default_detail()
        super().__init__(self.detail)

    @classmethod
    def default_detail(cls) -> str:
        return cls.__name__


class ValidationError(ServiceError):
    """A required field is missing or malformed. Correctable by the caller."""

    status_code = 400
    code = "validation_error"


class MalformedTimestamp(ValidationError):
    code = "malformed_timestamp"


class InvalidInterval(ValidationError):
    code = "invalid_interval"

    @classmethod
    def default_detail(cls) -> str:
        return "Schedule end time must be after the start time"


class MissingAttendeeInfo(ValidationError):
    code = "missing_attendee_info"

    @classmethod
    def default_detail(cls) -> str:
        return "Name and email are required to RSVP"


class InvalidGuestCount(ValidationError):
    code = "invalid_guest_count"

    @classmethod
    def default_detail(cls) -> str:
        return "Guest count must be a non-negative number"


class NotFoundError(ServiceError):
    status_code = 404
    code = "not_found"


class EventNotFound(NotFoundError):
    code = "event_not_found"

    @classmethod
    def default_detail(cls) -> str:
        return "Event not found"


class ScheduleNotFound(NotFoundError):
    code = "schedule_not_found"

    @classmethod
    def default_detail(cls) -> str:
        return "Schedule not found"


class RSVPNotFound(NotFoundError):
    code = "rsvp_not_found"

    @classmethod
    def default_detail(cls) -> str:
        return "RSVP not found"


class AccessDenied(ServiceError):
    status_code = 403
    code = "access_denied"

    @classmethod
    def default_detail(cls) -> str:
        return "Access denied"


class CapacityExceeded(ServiceError):
    """Admission rejected: not enough seats left. A business rule, not a server fault."""

    status_code = 400
    code = "capacity_exceeded"

    @classmethod
    def default_detail(cls) -> str:
        return "Event does not have enough available capacity"


class ConflictError(ServiceError):
    status_code = 409
    code = "conflict"

    @classmethod
    def default_detail(cls) -> str:
        return "The request conflicts with a concurrent change, please retry"


class ScheduleOverlap(ConflictError):
    code = "schedule_overlap"

    @classmethod
    def default_detail(cls) -> str:
        return "Schedule item overlaps another item of the same event"


class TransientStorageError(ServiceError):
    """Storage timed out or the connection failed. Safe for the caller to retry."""

    status_code = 503
    code = "storage_unavailable"
    retry_after = 1

    @classmethod
    def default_detail(cls) -> str:
        return "Storage is temporarily unavailable, please retry"


class DispatchError(ServiceError):
    """The notification transport failed. Never unwinds a committed write."""

    status_code = 502
    code = "dispatch_failed"

    @classmethod
    def default_detail(cls) -> str:
        return "Failed to send notification"
