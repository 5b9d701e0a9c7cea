"""Booking workflow: request a slot, arbitrate on accept, lifecycle moves, cancel."""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from barber_booking.config import settings
from barber_booking.core.arbiter import accepted_elsewhere, on_accept
from barber_booking.core.availability import Slot, classify
from barber_booking.core.booking import BookingRead, BookingStatus, check_transition, is_terminal
from barber_booking.core.cancellation import can_cancel, slot_instant
from barber_booking.core.clock import Clock
from barber_booking.core.slots import generate_slots
from barber_booking.errors import (
    ConflictResolutionPartialFailure,
    Forbidden,
    InvalidBookingRequest,
    NotFound,
    PolicyViolation,
    SlotUnavailable,
)
from barber_booking.models import BarberProfile, Service
from barber_booking.repository import BookingSnapshot, BookingStore, ScheduleStore

logger = logging.getLogger(__name__)


@dataclass
class AcceptResult:
    booking: BookingRead
    rejected_ids: List[int] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class BookingService:
    def __init__(self, session: Session, clock: Clock):
        self.session = session
        self.clock = clock
        self.bookings = BookingStore(session)
        self.schedules = ScheduleStore(session)
        self.tz = settings.tz

    def _slot_times(self, barber: BarberProfile, on_date: date) -> List[str]:
        config = self.schedules.get_schedule_config(barber.id)
        if config is None:
            return []
        return generate_slots(config, on_date, barber.slot_interval)

    def slots_for(self, barber: BarberProfile, on_date: date, customer_id: Optional[int]) -> List[Slot]:
        snapshot = BookingSnapshot(self.bookings, barber.id, on_date)
        return classify(self._slot_times(barber, on_date), snapshot.bookings, customer_id)

    def can_cancel(self, booking: BookingRead) -> bool:
        return can_cancel(booking, self.clock.now(), self.tz, settings.cancellation_notice_hours)

    def request_booking(
        self,
        customer_id: int,
        barber: BarberProfile,
        service: Service,
        on_date: date,
        time: str,
    ) -> BookingRead:
        now = self.clock.now().astimezone(self.tz)
        today = now.date()
        if on_date < today:
            raise InvalidBookingRequest("Cannot book an appointment in the past")
        if on_date >= today + timedelta(days=settings.booking_horizon_days):
            raise InvalidBookingRequest(
                f"Bookings open at most {settings.booking_horizon_days} days ahead"
            )

        slot_times = self._slot_times(barber, on_date)
        if time not in slot_times:
            raise InvalidBookingRequest(f"{time} is not a bookable slot on {on_date.isoformat()}")

        snapshot = BookingSnapshot(self.bookings, barber.id, on_date)
        slot = classify([time], snapshot.at(time), customer_id)[0]
        if slot.is_taken:
            raise SlotUnavailable(f"{on_date.isoformat()} {time} is already taken")
        if slot.is_requested_by_me:
            raise SlotUnavailable(f"You already requested {on_date.isoformat()} {time}")

        if slot_instant(on_date, time, self.tz) <= now:
            raise InvalidBookingRequest("Cannot book an appointment in the past")

        booking = self.bookings.create_booking(
            customer_id=customer_id,
            barber_id=barber.id,
            service_id=service.id,
            on_date=on_date,
            time=time,
            price=service.price,
        )
        logger.info(
            "Customer %s requested barber %s at %s %s (booking %s)",
            customer_id, barber.id, on_date.isoformat(), time, booking.id,
        )
        return booking

    def _get(self, booking_id: int) -> BookingRead:
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        return booking

    def _get_for_barber(self, booking_id: int, barber_id: int) -> BookingRead:
        booking = self._get(booking_id)
        if booking.barber_id != barber_id:
            raise Forbidden("Booking belongs to another barber")
        return booking

    def accept(self, booking_id: int, barber_id: int) -> AcceptResult:
        booking = self._get_for_barber(booking_id, barber_id)
        check_transition(booking.status, BookingStatus.accepted)

        # read the slot's current rows before claiming it
        snapshot = BookingSnapshot(self.bookings, barber_id, booking.date)
        if accepted_elsewhere(booking, snapshot.bookings):
            raise SlotUnavailable(f"{booking.date.isoformat()} {booking.time} is already accepted")

        try:
            self.bookings.set_status(booking.id, BookingStatus.accepted, strict=True)
        except IntegrityError:
            raise SlotUnavailable(f"{booking.date.isoformat()} {booking.time} is already accepted")

        losers = on_accept(booking, snapshot.refresh())
        rejected_ids = []
        failure = ConflictResolutionPartialFailure(accepted_id=booking.id)
        for loser in losers:
            if self.bookings.set_status(loser.id, BookingStatus.rejected):
                rejected_ids.append(loser.id)
            else:
                failure.failed_ids.append(loser.id)

        warnings = []
        if failure.failed_ids:
            logger.warning(failure.message)
            warnings.append(failure.message)

        logger.info(
            "Barber %s accepted booking %s, auto-rejected %d colliding request(s)",
            barber_id, booking.id, len(rejected_ids),
        )
        return AcceptResult(booking=self._get(booking.id), rejected_ids=rejected_ids, warnings=warnings)

    def _barber_move(self, booking_id: int, barber_id: int, target: BookingStatus) -> BookingRead:
        booking = self._get_for_barber(booking_id, barber_id)
        check_transition(booking.status, target)
        self.bookings.set_status(booking.id, target, strict=True)
        logger.info("Barber %s moved booking %s to %s", barber_id, booking.id, target.value)
        return self._get(booking.id)

    def reject(self, booking_id: int, barber_id: int) -> BookingRead:
        return self._barber_move(booking_id, barber_id, BookingStatus.rejected)

    def complete(self, booking_id: int, barber_id: int) -> BookingRead:
        return self._barber_move(booking_id, barber_id, BookingStatus.completed)

    def mark_no_show(self, booking_id: int, barber_id: int) -> BookingRead:
        return self._barber_move(booking_id, barber_id, BookingStatus.no_show)

    def cancel(self, booking_id: int, user_id: int, barber_id: Optional[int] = None) -> BookingRead:
        booking = self._get(booking_id)
        is_customer = booking.customer_id == user_id
        is_barber = barber_id is not None and booking.barber_id == barber_id
        if not (is_customer or is_barber):
            raise Forbidden("Forbidden")

        if booking.status == BookingStatus.cancelled:
            return booking

        if not self.can_cancel(booking):
            if is_terminal(booking.status):
                reason = f"Booking is already {booking.status.value}"
            else:
                reason = (
                    f"Bookings can only be cancelled at least "
                    f"{settings.cancellation_notice_hours} hours in advance"
                )
            logger.info("Refused cancel of booking %s: %s", booking.id, reason)
            raise PolicyViolation(reason)

        check_transition(booking.status, BookingStatus.cancelled)
        self.bookings.set_status(booking.id, BookingStatus.cancelled, strict=True)
        logger.info("User %s cancelled booking %s", user_id, booking.id)
        return self._get(booking.id)
