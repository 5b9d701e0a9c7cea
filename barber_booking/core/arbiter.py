# barber_booking/core/arbiter.py

from typing import Iterable, List

from barber_booking.core.booking import BookingRead, BookingStatus


def on_accept(booking: BookingRead, all_bookings_for_barber: Iterable[BookingRead]) -> List[BookingRead]:
    """Pending requests that lose the slot when ``booking`` is accepted."""
    return [
        b for b in all_bookings_for_barber
        if b.id != booking.id
        and b.status == BookingStatus.pending
        and b.same_slot(booking)
    ]


def accepted_elsewhere(booking: BookingRead, all_bookings_for_barber: Iterable[BookingRead]) -> List[BookingRead]:
    # another accepted row already holds the slot
    return [
        b for b in all_bookings_for_barber
        if b.id != booking.id
        and b.status == BookingStatus.accepted
        and b.same_slot(booking)
    ]
