# barber_booking/routers/barbers_routes.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barber_booking.auth import get_current_user
from barber_booking.config import settings
from barber_booking.core.schedule import ScheduleConfig, default_schedule, validate_schedule
from barber_booking.db import get_session
from barber_booking.deps import (
    find_barber_profile,
    get_booking_service,
    get_bookable_barber,
    get_my_barber_profile,
    require_role,
)
from barber_booking.errors import ConfigurationError
from barber_booking.models import BarberProfile, Review, Service
from barber_booking.repository import ScheduleStore
from barber_booking.schemas import (
    BarberProfileIn,
    BarberProfilePublic,
    BarberScheduleIn,
    BarberSchedulePublic,
    ReviewsResponse,
    ServiceCreate,
    ServicePublic,
    SlotsResponse,
)
from barber_booking.services.booking_service import BookingService

router = APIRouter(
    prefix="/barbers",
    tags=["barbers"],
)


@router.put("/me/profile", response_model=BarberProfilePublic)
def upsert_my_profile(
    profile: BarberProfileIn,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")

    db_profile = find_barber_profile(session, current_user["id"])
    if db_profile is None:
        # new barbers start from the default week and wait for admin approval
        db_profile = BarberProfile(
            user_id=current_user["id"],
            working_hours=[wd.model_dump() for wd in default_schedule().working_hours],
            slot_interval=settings.default_slot_interval,
            **profile.model_dump(),
        )
    else:
        for key, value in profile.model_dump().items():
            setattr(db_profile, key, value)

    session.add(db_profile)
    session.commit()
    session.refresh(db_profile)
    return db_profile


@router.get("/me/profile", response_model=BarberProfilePublic)
def get_my_profile(barber: BarberProfile = Depends(get_my_barber_profile)):
    return barber


@router.put("/me/schedule", response_model=BarberSchedulePublic)
def update_my_schedule(
    schedule: BarberScheduleIn,
    session: Session = Depends(get_session),
    barber: BarberProfile = Depends(get_my_barber_profile),
):
    config = ScheduleConfig(working_hours=schedule.working_hours)
    try:
        validate_schedule(config)
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=exc.detail)

    saved = ScheduleStore(session).save_schedule_config(barber.id, config, schedule.slot_interval)
    return {
        "barber_id": saved.id,
        "working_hours": config.working_hours,
        "slot_interval": saved.slot_interval,
    }


@router.get("/me/schedule", response_model=BarberSchedulePublic)
def get_my_schedule(
    session: Session = Depends(get_session),
    barber: BarberProfile = Depends(get_my_barber_profile),
):
    config = ScheduleStore(session).get_schedule_config(barber.id)
    if config is None:
        raise HTTPException(status_code=404, detail="Schedule not set")
    return {
        "barber_id": barber.id,
        "working_hours": config.working_hours,
        "slot_interval": barber.slot_interval,
    }


@router.post("/me/services", response_model=ServicePublic, status_code=201)
def add_service(
    service: ServiceCreate,
    session: Session = Depends(get_session),
    barber: BarberProfile = Depends(get_my_barber_profile),
):
    db_service = Service(barber_id=barber.id, **service.model_dump())
    session.add(db_service)
    session.commit()
    session.refresh(db_service)
    return db_service


@router.delete("/me/services/{service_id}", status_code=204)
def remove_service(
    service_id: int,
    session: Session = Depends(get_session),
    barber: BarberProfile = Depends(get_my_barber_profile),
):
    db_service = session.get(Service, service_id)
    if db_service is None or db_service.barber_id != barber.id:
        raise HTTPException(status_code=404, detail="Service not found")
    session.delete(db_service)
    session.commit()


@router.get("", response_model=List[BarberProfilePublic])
def list_barbers(
    neighborhood: Optional[str] = None,
    session: Session = Depends(get_session),
):
    stmt = select(BarberProfile).where(BarberProfile.approved == True)  # noqa: E712
    if neighborhood:
        stmt = stmt.where(BarberProfile.neighborhood == neighborhood)
    return session.exec(stmt.order_by(BarberProfile.full_name)).all()


@router.get("/{barber_id}", response_model=BarberProfilePublic)
def get_barber(barber: BarberProfile = Depends(get_bookable_barber)):
    return barber


@router.get("/{barber_id}/services", response_model=List[ServicePublic])
def list_services(
    session: Session = Depends(get_session),
    barber: BarberProfile = Depends(get_bookable_barber),
):
    return session.exec(
        select(Service).where(Service.barber_id == barber.id).order_by(Service.price)
    ).all()


@router.get("/{barber_id}/slots", response_model=SlotsResponse)
def barber_slots(
    date: date,
    barber: BarberProfile = Depends(get_bookable_barber),
    service: BookingService = Depends(get_booking_service),
    current_user: dict = Depends(get_current_user),
):
    customer_id = current_user["id"] if current_user["role"] == "customer" else None
    slots = service.slots_for(barber, date, customer_id)
    return {"barber_id": barber.id, "date": date, "slots": slots}


@router.get("/{barber_id}/reviews", response_model=ReviewsResponse)
def list_reviews(
    session: Session = Depends(get_session),
    barber: BarberProfile = Depends(get_bookable_barber),
):
    reviews = session.exec(
        select(Review).where(Review.barber_id == barber.id).order_by(Review.created_at.desc())
    ).all()
    average = round(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else 0.0
    return {"barber_id": barber.id, "average_rating": average, "reviews": reviews}
