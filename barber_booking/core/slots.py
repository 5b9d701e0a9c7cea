# barber_booking/core/slots.py

import logging
from datetime import date
from typing import List

from barber_booking.core.schedule import ScheduleConfig, check_day, to_hhmm, to_minutes
from barber_booking.errors import ConfigurationError

logger = logging.getLogger(__name__)


def generate_slots(config: ScheduleConfig, on_date: date, interval_minutes: int) -> List[str]:
    """Bookable start times ("HH:MM") for one day of a barber's template.

    A closed day, a non-positive interval or a malformed day all give an
    empty list: the barber just looks unbookable that day.
    """
    if interval_minutes <= 0:
        return []

    day = config.day_for(on_date.weekday())
    if day is None or not day.enabled:
        return []

    try:
        check_day(day)
    except ConfigurationError as exc:
        logger.warning("Ignoring malformed working day for %s: %s", on_date.isoformat(), exc.detail)
        return []

    start = to_minutes(day.start_time)
    end = to_minutes(day.end_time)
    breaks = [(to_minutes(b.start_time), to_minutes(b.end_time)) for b in day.breaks]

    slots = []
    current = start
    while current + interval_minutes <= end:
        # half-open: a slot may start exactly when a break ends
        in_break = any(b_start <= current < b_end for b_start, b_end in breaks)
        if not in_break:
            slots.append(to_hhmm(current))
        current += interval_minutes
    return slots
