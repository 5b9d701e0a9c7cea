from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import barber_booking.models  # noqa: F401
from barber_booking.config import settings
from barber_booking.core.clock import FixedClock
from barber_booking.core.schedule import BreakTime, ScheduleConfig, WorkingDay, WEEKDAYS
from barber_booking.db import get_session
from barber_booking.deps import get_clock
from barber_booking.main import app

# Wednesday morning in the booking timezone
NOW = datetime(2024, 1, 10, 10, 0, tzinfo=settings.tz)


def week(start="09:00", end="17:00", breaks=(), closed=("Saturday", "Sunday")):
    return ScheduleConfig(working_hours=[
        WorkingDay(
            day=name,
            enabled=name not in closed,
            start_time=start,
            end_time=end,
            breaks=[BreakTime(start_time=s, end_time=e) for s, e in breaks],
        )
        for name in WEEKDAYS
    ])


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def client(engine, clock):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email, role, password="secret-pass"):
    r = client.post("/users", json={"email": email, "password": password, "role": role, "full_name": email})
    assert r.status_code == 201, r.text
    r = client.post("/auth/login", data={"username": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def admin(client):
    return register(client, "admin@example.com", "admin")


@pytest.fixture
def barber(client, admin):
    """An approved barber with a Mon-Fri 09:00-17:00 week, 45 min slots and one service."""
    headers = register(client, "barber@example.com", "barber")
    r = client.put("/barbers/me/profile", headers=headers, json={"full_name": "Ivan", "neighborhood": "Centar"})
    assert r.status_code == 200, r.text
    barber_id = r.json()["id"]

    schedule = week(breaks=[("12:00", "13:00")]).model_dump()
    r = client.put("/barbers/me/schedule", headers=headers, json={**schedule, "slot_interval": 45})
    assert r.status_code == 200, r.text

    r = client.patch(f"/admin/barbers/{barber_id}/approve", headers=admin)
    assert r.status_code == 200, r.text

    r = client.post("/barbers/me/services", headers=headers, json={"name": "Fade", "price": 20})
    assert r.status_code == 201, r.text

    return {"headers": headers, "id": barber_id, "service_id": r.json()["id"]}


@pytest.fixture
def customers(client):
    return [register(client, f"customer{i}@example.com", "customer") for i in range(3)]
