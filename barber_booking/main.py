# barber_booking/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from barber_booking.config import settings
from barber_booking.db import init_db
from barber_booking.errors import BookingError
from barber_booking.routers import accounts_routes, admin_routes, barbers_routes, bookings_routes

if settings.env != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(
        "Booking rules: timezone %s, cancellation notice %dh, horizon %d days",
        settings.booking_timezone,
        settings.cancellation_notice_hours,
        settings.booking_horizon_days,
    )
    yield


app = FastAPI(
    title="Barber Booking API",
    description="Barbershop bookings: slots, request arbitration, cancellations",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(accounts_routes.router)
app.include_router(barbers_routes.router)
app.include_router(bookings_routes.router)
app.include_router(admin_routes.router)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/health")
def health_check():
    return {"status": "ok"}
