# barber_booking/models.py

from typing import Optional, List
from datetime import datetime, timezone

from sqlalchemy import Index, UniqueConstraint, text
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    full_name: Optional[str] = None
    role: str  # customer, barber or admin


class BarberProfile(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True, unique=True)
    full_name: str
    neighborhood: str = ""
    address: str = ""
    bio: str = ""
    approved: bool = False
    # list of WorkingDay dicts, Monday first
    working_hours: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    slot_interval: int = 45
    created_at: datetime = Field(default_factory=_utcnow)


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="barberprofile.id", index=True)
    name: str
    price: float
    duration: Optional[str] = None
    description: Optional[str] = None


class Booking(SQLModel, table=True):
    __table_args__ = (
        # at most one accepted booking per barber slot
        Index(
            "uq_booking_accepted_slot",
            "barber_id", "date", "time",
            unique=True,
            sqlite_where=text("status = 'accepted'"),
            postgresql_where=text("status = 'accepted'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    customer_id: int = Field(foreign_key="user.id", index=True)
    barber_id: int = Field(foreign_key="barberprofile.id", index=True)
    service_id: int = Field(foreign_key="service.id")
    date: str = Field(index=True)  # YYYY-MM-DD
    time: str  # HH:MM
    status: str = "pending"
    price: float
    created_at: datetime = Field(default_factory=_utcnow)


class Review(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("booking_id", name="uq_review_booking"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    booking_id: int = Field(foreign_key="booking.id")
    barber_id: int = Field(foreign_key="barberprofile.id", index=True)
    customer_id: int = Field(foreign_key="user.id")
    rating: int
    comment: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
