# barber_booking/core/booking.py

from datetime import date as Date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from barber_booking.core.schedule import HHMM_PATTERN
from barber_booking.errors import InvalidTransition


class BookingStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no-show"


TERMINAL_STATUSES = frozenset({
    BookingStatus.completed,
    BookingStatus.rejected,
    BookingStatus.cancelled,
    BookingStatus.no_show,
})

ALLOWED_TRANSITIONS = {
    BookingStatus.pending: {BookingStatus.accepted, BookingStatus.rejected, BookingStatus.cancelled},
    BookingStatus.accepted: {BookingStatus.completed, BookingStatus.cancelled, BookingStatus.no_show},
}


class BookingRead(BaseModel):
    """A booking as the core sees it, mapped from the store row."""

    id: int
    customer_id: int
    barber_id: int
    service_id: int
    date: Date
    time: str = Field(pattern=HHMM_PATTERN)
    status: BookingStatus
    price: float
    created_at: datetime

    def same_slot(self, other: "BookingRead") -> bool:
        return (
            self.barber_id == other.barber_id
            and self.date == other.date
            and self.time == other.time
        )


def is_terminal(status: BookingStatus) -> bool:
    return status in TERMINAL_STATUSES


def check_transition(current: BookingStatus, target: BookingStatus) -> None:
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransition(f"Cannot move booking from {current.value} to {target.value}")
