# barber_booking/core/availability.py

from typing import Iterable, List, Optional

from pydantic import BaseModel, computed_field

from barber_booking.core.booking import BookingRead, BookingStatus


class Slot(BaseModel):
    time: str
    is_taken: bool
    is_requested_by_me: bool

    @computed_field
    @property
    def selectable(self) -> bool:
        return not (self.is_taken or self.is_requested_by_me)


def classify(
    slots: Iterable[str],
    bookings: Iterable[BookingRead],
    requesting_customer_id: Optional[int],
) -> List[Slot]:
    """Mark each slot taken (accepted booking) or already requested by the caller.

    Pending requests from other customers never block a slot; the barber
    arbitrates between them on accept.
    """
    accepted_times = set()
    my_pending_times = set()
    for b in bookings:
        if b.status == BookingStatus.accepted:
            accepted_times.add(b.time)
        elif (
            b.status == BookingStatus.pending
            and requesting_customer_id is not None
            and b.customer_id == requesting_customer_id
        ):
            my_pending_times.add(b.time)

    return [
        Slot(
            time=t,
            is_taken=t in accepted_times,
            is_requested_by_me=t in my_pending_times,
        )
        for t in slots
    ]
