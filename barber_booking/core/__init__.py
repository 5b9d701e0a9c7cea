from barber_booking.core.arbiter import on_accept
from barber_booking.core.availability import Slot, classify
from barber_booking.core.booking import BookingRead, BookingStatus
from barber_booking.core.cancellation import can_cancel
from barber_booking.core.schedule import ScheduleConfig, WorkingDay, BreakTime, validate_schedule
from barber_booking.core.slots import generate_slots

__all__ = [
    "BookingRead",
    "BookingStatus",
    "BreakTime",
    "ScheduleConfig",
    "Slot",
    "WorkingDay",
    "can_cancel",
    "classify",
    "generate_slots",
    "on_accept",
    "validate_schedule",
]
