"""Store boundary: maps SQLModel rows to the typed read models the core works on."""

import logging
from datetime import date
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from barber_booking.core.booking import BookingRead, BookingStatus
from barber_booking.core.schedule import ScheduleConfig
from barber_booking.models import BarberProfile, Booking

logger = logging.getLogger(__name__)


def to_read(row: Booking) -> BookingRead:
    return BookingRead(
        id=row.id,
        customer_id=row.customer_id,
        barber_id=row.barber_id,
        service_id=row.service_id,
        date=date.fromisoformat(row.date),
        time=row.time,
        status=BookingStatus(row.status),
        price=row.price,
        created_at=row.created_at,
    )


class BookingStore:
    """Booking persistence for one request's session."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, booking_id: int) -> Optional[BookingRead]:
        row = self.session.get(Booking, booking_id)
        return to_read(row) if row is not None else None

    def fetch_bookings(self, barber_id: int, on_date: date) -> List[BookingRead]:
        rows = self.session.exec(
            select(Booking)
            .where(Booking.barber_id == barber_id)
            .where(Booking.date == on_date.isoformat())
            .order_by(Booking.time, Booking.id)
        ).all()
        return [to_read(r) for r in rows]

    def fetch_for_barber(
        self,
        barber_id: int,
        status: Optional[BookingStatus] = None,
        on_date: Optional[date] = None,
    ) -> List[BookingRead]:
        stmt = select(Booking).where(Booking.barber_id == barber_id)
        if status is not None:
            stmt = stmt.where(Booking.status == status.value)
        if on_date is not None:
            stmt = stmt.where(Booking.date == on_date.isoformat())
        stmt = stmt.order_by(Booking.date, Booking.time, Booking.id)
        return [to_read(r) for r in self.session.exec(stmt).all()]

    def fetch_for_customer(self, customer_id: int, status: Optional[BookingStatus] = None) -> List[BookingRead]:
        stmt = select(Booking).where(Booking.customer_id == customer_id)
        if status is not None:
            stmt = stmt.where(Booking.status == status.value)
        stmt = stmt.order_by(Booking.date, Booking.time, Booking.id)
        return [to_read(r) for r in self.session.exec(stmt).all()]

    def create_booking(
        self,
        customer_id: int,
        barber_id: int,
        service_id: int,
        on_date: date,
        time: str,
        price: float,
    ) -> BookingRead:
        row = Booking(
            customer_id=customer_id,
            barber_id=barber_id,
            service_id=service_id,
            date=on_date.isoformat(),
            time=time,
            price=price,
            status=BookingStatus.pending.value,
        )
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return to_read(row)

    def set_status(self, booking_id: int, status: BookingStatus, strict: bool = False) -> bool:
        """Write one status; False when the row is gone or the write fails.

        With ``strict`` the database error is re-raised after rollback.
        """
        row = self.session.get(Booking, booking_id)
        if row is None:
            return False
        row.status = status.value
        self.session.add(row)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            if strict:
                raise
            logger.exception("Failed to set booking %s to %s", booking_id, status.value)
            return False
        return True


class ScheduleStore:
    def __init__(self, session: Session):
        self.session = session

    def get_schedule_config(self, barber_id: int) -> Optional[ScheduleConfig]:
        barber = self.session.get(BarberProfile, barber_id)
        if barber is None or not barber.working_hours:
            return None
        try:
            return ScheduleConfig(working_hours=barber.working_hours)
        except ValidationError as exc:
            # unreadable template: barber shows no slots rather than failing
            logger.warning("Stored schedule for barber %s is unreadable: %s", barber_id, exc)
            return None

    def save_schedule_config(self, barber_id: int, config: ScheduleConfig, slot_interval: int) -> BarberProfile:
        barber = self.session.get(BarberProfile, barber_id)
        barber.working_hours = [wd.model_dump() for wd in config.working_hours]
        barber.slot_interval = slot_interval
        self.session.add(barber)
        self.session.commit()
        self.session.refresh(barber)
        return barber


class BookingSnapshot:
    """In-memory booking set for one barber/date, refreshed on demand."""

    def __init__(self, store: BookingStore, barber_id: int, on_date: date):
        self.store = store
        self.barber_id = barber_id
        self.date = on_date
        self.bookings: List[BookingRead] = []
        self.refresh()

    def refresh(self) -> List[BookingRead]:
        self.bookings = self.store.fetch_bookings(self.barber_id, self.date)
        return self.bookings

    def at(self, time: str) -> List[BookingRead]:
        return [b for b in self.bookings if b.time == time]
