# barber_booking/errors.py

from dataclasses import dataclass, field


class BookingError(Exception):
    """Base for domain errors that surface to the caller as an HTTP status."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ConfigurationError(BookingError):
    status_code = 422


class InvalidBookingRequest(BookingError):
    status_code = 422


class SlotUnavailable(BookingError):
    status_code = 409


class PolicyViolation(BookingError):
    status_code = 409


class InvalidTransition(BookingError):
    status_code = 409


class NotFound(BookingError):
    status_code = 404


class Forbidden(BookingError):
    status_code = 403


@dataclass
class ConflictResolutionPartialFailure:
    """Auto-rejects that did not persist after an accept.

    Not raised: the accept already took effect and the stale pending rows
    heal on the next read.
    """

    accepted_id: int
    failed_ids: list[int] = field(default_factory=list)

    @property
    def message(self) -> str:
        ids = ", ".join(str(i) for i in self.failed_ids)
        return f"Booking {self.accepted_id} accepted but could not reject colliding requests: {ids}"
