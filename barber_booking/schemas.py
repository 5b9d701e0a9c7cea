# barber_booking/schemas.py

from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime, date
from typing import List, Optional

from barber_booking.core.availability import Slot
from barber_booking.core.booking import BookingRead
from barber_booking.core.schedule import HHMM_PATTERN, WorkingDay


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    customer = "customer"
    barber = "barber"
    admin = "admin"


class UserPublic(BaseModel):
    id: int
    email: str
    role: UserRole
    full_name: Optional[str] = None


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    role: UserRole
    full_name: Optional[str] = None


class BarberProfileIn(BaseModel):
    full_name: str = Field(min_length=1)
    neighborhood: str = ""
    address: str = ""
    bio: str = ""


class BarberProfilePublic(BaseModel):
    id: int
    user_id: int
    full_name: str
    neighborhood: str
    address: str
    bio: str
    approved: bool
    slot_interval: int


class BarberScheduleIn(BaseModel):
    working_hours: List[WorkingDay]
    slot_interval: int = Field(default=45, ge=5, le=240)


class BarberSchedulePublic(BaseModel):
    barber_id: int
    working_hours: List[WorkingDay]
    slot_interval: int


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    duration: Optional[str] = None
    description: Optional[str] = None


class ServicePublic(BaseModel):
    id: int
    barber_id: int
    name: str
    price: float
    duration: Optional[str] = None
    description: Optional[str] = None


class SlotsResponse(BaseModel):
    barber_id: int
    date: date
    slots: List[Slot]


class BookingCreate(BaseModel):
    service_id: int
    date: date
    time: str = Field(pattern=HHMM_PATTERN)


class BookingPublic(BookingRead):
    can_cancel: Optional[bool] = None


class AcceptResponse(BaseModel):
    booking: BookingRead
    rejected_ids: List[int]
    warnings: List[str] = Field(default_factory=list)


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str = ""


class ReviewPublic(BaseModel):
    id: int
    booking_id: int
    barber_id: int
    customer_id: int
    rating: int
    comment: str
    created_at: datetime


class ReviewsResponse(BaseModel):
    barber_id: int
    average_rating: float
    reviews: List[ReviewPublic]
