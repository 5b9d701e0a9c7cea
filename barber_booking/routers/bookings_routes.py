# barber_booking/routers/bookings_routes.py

from datetime import date
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from barber_booking.auth import get_current_user
from barber_booking.core.booking import BookingStatus
from barber_booking.db import get_session
from barber_booking.deps import (
    find_barber_profile,
    get_booking_service,
    get_bookable_barber,
    get_my_barber_profile,
    require_role,
)
from barber_booking.models import BarberProfile, Review, Service
from barber_booking.schemas import (
    AcceptResponse,
    BookingCreate,
    BookingPublic,
    ReviewCreate,
    ReviewPublic,
)
from barber_booking.services.booking_service import BookingService

router = APIRouter(
    tags=["bookings"],
)


def _parse_status(status: Optional[str]) -> Optional[BookingStatus]:
    if status is None or status == "all":
        return None
    try:
        return BookingStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in BookingStatus)
        raise HTTPException(status_code=422, detail=f"status must be 'all' or one of: {allowed}")


@router.post("/barbers/{barber_id}/bookings", response_model=BookingPublic, status_code=201)
def request_booking(
    req: BookingCreate,
    session: Session = Depends(get_session),
    barber: BarberProfile = Depends(get_bookable_barber),
    service: BookingService = Depends(get_booking_service),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "customer")

    offered = session.get(Service, req.service_id)
    if offered is None or offered.barber_id != barber.id:
        raise HTTPException(status_code=422, detail="Service not available")

    booking = service.request_booking(current_user["id"], barber, offered, req.date, req.time)
    return BookingPublic(**booking.model_dump(), can_cancel=service.can_cancel(booking))


@router.get("/customers/me/bookings", response_model=List[BookingPublic])
def list_my_bookings(
    status: Optional[str] = "all",
    service: BookingService = Depends(get_booking_service),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "customer")
    bookings = service.bookings.fetch_for_customer(current_user["id"], _parse_status(status))
    return [BookingPublic(**b.model_dump(), can_cancel=service.can_cancel(b)) for b in bookings]


@router.get("/barbers/me/bookings", response_model=List[BookingPublic])
def list_barber_bookings(
    status: Optional[str] = "all",
    on_date: Optional[date] = None,
    barber: BarberProfile = Depends(get_my_barber_profile),
    service: BookingService = Depends(get_booking_service),
):
    bookings = service.bookings.fetch_for_barber(barber.id, _parse_status(status), on_date)
    return [BookingPublic(**b.model_dump(), can_cancel=service.can_cancel(b)) for b in bookings]


@router.patch("/bookings/{booking_id}/accept", response_model=AcceptResponse)
def accept_booking(
    booking_id: int,
    barber: BarberProfile = Depends(get_my_barber_profile),
    service: BookingService = Depends(get_booking_service),
):
    result = service.accept(booking_id, barber.id)
    return {
        "booking": result.booking,
        "rejected_ids": result.rejected_ids,
        "warnings": result.warnings,
    }


@router.patch("/bookings/{booking_id}/reject", response_model=BookingPublic)
def reject_booking(
    booking_id: int,
    barber: BarberProfile = Depends(get_my_barber_profile),
    service: BookingService = Depends(get_booking_service),
):
    return service.reject(booking_id, barber.id)


@router.patch("/bookings/{booking_id}/complete", response_model=BookingPublic)
def complete_booking(
    booking_id: int,
    barber: BarberProfile = Depends(get_my_barber_profile),
    service: BookingService = Depends(get_booking_service),
):
    return service.complete(booking_id, barber.id)


@router.patch("/bookings/{booking_id}/no-show", response_model=BookingPublic)
def no_show_booking(
    booking_id: int,
    barber: BarberProfile = Depends(get_my_barber_profile),
    service: BookingService = Depends(get_booking_service),
):
    return service.mark_no_show(booking_id, barber.id)


@router.patch("/bookings/{booking_id}/cancel", response_model=BookingPublic)
def cancel_booking(
    booking_id: int,
    session: Session = Depends(get_session),
    service: BookingService = Depends(get_booking_service),
    current_user: dict = Depends(get_current_user),
):
    # either the customer who booked or the barber holding the slot
    barber_id = None
    if current_user["role"] == "barber":
        profile = find_barber_profile(session, current_user["id"])
        barber_id = profile.id if profile is not None else None

    return service.cancel(booking_id, current_user["id"], barber_id)


@router.post("/bookings/{booking_id}/review", response_model=ReviewPublic, status_code=201)
def review_booking(
    booking_id: int,
    review: ReviewCreate,
    session: Session = Depends(get_session),
    service: BookingService = Depends(get_booking_service),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "customer")

    booking = service.bookings.get(booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    if booking.customer_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    if booking.status != BookingStatus.completed:
        raise HTTPException(status_code=409, detail="Only completed bookings can be reviewed")

    db_review = Review(
        booking_id=booking.id,
        barber_id=booking.barber_id,
        customer_id=booking.customer_id,
        rating=review.rating,
        comment=review.comment,
    )
    session.add(db_review)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Booking already reviewed")

    session.refresh(db_review)
    return db_review
