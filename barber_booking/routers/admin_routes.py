# barber_booking/routers/admin_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barber_booking.auth import get_current_user
from barber_booking.db import get_session
from barber_booking.deps import require_role
from barber_booking.models import BarberProfile
from barber_booking.schemas import BarberProfilePublic

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
)


@router.get("/barbers/pending", response_model=List[BarberProfilePublic])
def pending_barbers(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    return session.exec(
        select(BarberProfile)
        .where(BarberProfile.approved == False)  # noqa: E712
        .order_by(BarberProfile.created_at)
    ).all()


@router.patch("/barbers/{barber_id}/approve", response_model=BarberProfilePublic)
def approve_barber(
    barber_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    barber = session.get(BarberProfile, barber_id)
    if barber is None:
        raise HTTPException(status_code=404, detail="Barber Not Found")

    barber.approved = True
    session.add(barber)
    session.commit()
    session.refresh(barber)
    logger.info("Admin %s approved barber %s", current_user["email"], barber.id)
    return barber
