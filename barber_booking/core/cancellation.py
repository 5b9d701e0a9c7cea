# barber_booking/core/cancellation.py

from datetime import date, datetime, timedelta, timezone, tzinfo

from barber_booking.core.booking import BookingRead, is_terminal
from barber_booking.core.schedule import to_minutes

DEFAULT_NOTICE_HOURS = 6


def slot_instant(on_date: date, time: str, tz: tzinfo) -> datetime:
    minutes = to_minutes(time)
    return datetime(on_date.year, on_date.month, on_date.day, minutes // 60, minutes % 60, tzinfo=tz)


def scheduled_instant(booking: BookingRead, tz: tzinfo) -> datetime:
    return slot_instant(booking.date, booking.time, tz)


def can_cancel(booking: BookingRead, now: datetime, tz: tzinfo, notice_hours: int = DEFAULT_NOTICE_HOURS) -> bool:
    if is_terminal(booking.status):
        return False
    if now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    # compare in UTC, same-zone subtraction ignores DST offsets
    remaining = scheduled_instant(booking, tz).astimezone(timezone.utc) - now.astimezone(timezone.utc)
    return remaining >= timedelta(hours=notice_hours)
