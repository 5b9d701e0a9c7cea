# barber_booking/deps.py

from fastapi import Depends, HTTPException
from sqlmodel import Session, select

from barber_booking.auth import get_current_user
from barber_booking.config import settings
from barber_booking.core.clock import Clock, SystemClock
from barber_booking.db import get_session
from barber_booking.models import BarberProfile
from barber_booking.services.booking_service import BookingService


def require_role(user: dict, role: str):
    if user["role"] != role:
        raise HTTPException(status_code=403, detail="Forbidden")


def get_clock() -> Clock:
    return SystemClock(settings.tz)


def get_booking_service(
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> BookingService:
    return BookingService(session, clock)


def find_barber_profile(session: Session, user_id: int):
    return session.exec(
        select(BarberProfile).where(BarberProfile.user_id == user_id)
    ).first()


def get_my_barber_profile(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
) -> BarberProfile:
    require_role(current_user, "barber")
    profile = find_barber_profile(session, current_user["id"])
    if profile is None:
        raise HTTPException(status_code=409, detail="Barber profile must be set up first")
    return profile


def get_bookable_barber(barber_id: int, session: Session = Depends(get_session)) -> BarberProfile:
    barber = session.get(BarberProfile, barber_id)
    if barber is None or not barber.approved:
        raise HTTPException(status_code=404, detail="Barber Not Found")
    return barber
