from datetime import date, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from barber_booking.core.booking import BookingStatus
from barber_booking.errors import (
    Forbidden,
    InvalidBookingRequest,
    InvalidTransition,
    NotFound,
    PolicyViolation,
    SlotUnavailable,
)
from barber_booking.models import BarberProfile, Booking, Service, User
from barber_booking.repository import BookingSnapshot, BookingStore, ScheduleStore
from barber_booking.services.booking_service import BookingService
from tests.conftest import week

TODAY = date(2024, 1, 10)
TOMORROW = TODAY + timedelta(days=1)


@pytest.fixture
def shop(session):
    users = [User(email=f"c{i}@example.com", password_hash="x", role="customer") for i in range(3)]
    owner = User(email="b@example.com", password_hash="x", role="barber")
    session.add_all(users + [owner])
    session.commit()

    barber = BarberProfile(
        user_id=owner.id,
        full_name="Ivan",
        approved=True,
        working_hours=[wd.model_dump() for wd in week(breaks=[("12:00", "13:00")]).working_hours],
        slot_interval=45,
    )
    session.add(barber)
    session.commit()
    fade = Service(barber_id=barber.id, name="Fade", price=20)
    session.add(fade)
    session.commit()
    return {"barber": barber, "service": fade, "customers": [u.id for u in users]}


@pytest.fixture
def svc(session, clock):
    return BookingService(session, clock)


def test_slots_for_marks_accepted_and_own_requests(svc, shop):
    c1, c2, _ = shop["customers"]
    first = svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    svc.request_booking(c2, shop["barber"], shop["service"], TOMORROW, "09:45")
    svc.accept(first.id, shop["barber"].id)

    slots = {s.time: s for s in svc.slots_for(shop["barber"], TOMORROW, c2)}
    assert slots["09:00"].is_taken
    assert slots["09:45"].is_requested_by_me
    assert slots["10:30"].selectable
    assert "12:00" not in slots


def test_racing_requests_then_accept(svc, shop):
    bookings = [
        svc.request_booking(c, shop["barber"], shop["service"], TOMORROW, "10:30")
        for c in shop["customers"]
    ]
    other_slot = svc.request_booking(shop["customers"][0], shop["barber"], shop["service"], TOMORROW, "11:15")

    result = svc.accept(bookings[1].id, shop["barber"].id)

    assert result.booking.status == BookingStatus.accepted
    assert sorted(result.rejected_ids) == sorted([bookings[0].id, bookings[2].id])
    assert result.warnings == []
    store = svc.bookings
    assert store.get(bookings[0].id).status == BookingStatus.rejected
    assert store.get(bookings[2].id).status == BookingStatus.rejected
    assert store.get(other_slot.id).status == BookingStatus.pending


def test_duplicate_self_request_refused(svc, shop):
    c1 = shop["customers"][0]
    svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    with pytest.raises(SlotUnavailable, match="already requested"):
        svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")


def test_request_on_accepted_slot_refused(svc, shop):
    c1, c2, _ = shop["customers"]
    first = svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    svc.accept(first.id, shop["barber"].id)
    with pytest.raises(SlotUnavailable, match="already taken"):
        svc.request_booking(c2, shop["barber"], shop["service"], TOMORROW, "09:00")


@pytest.mark.parametrize("on_date, time, message", [
    (TODAY - timedelta(days=1), "09:00", "in the past"),
    (TODAY, "09:45", "in the past"),
    (TODAY + timedelta(days=7), "09:00", "days ahead"),
    (TOMORROW, "09:10", "not a bookable slot"),
    (TOMORROW, "12:00", "not a bookable slot"),
    (date(2024, 1, 13), "09:00", "not a bookable slot"),
])
def test_invalid_requests(svc, shop, on_date, time, message):
    with pytest.raises(InvalidBookingRequest, match=message):
        svc.request_booking(shop["customers"][0], shop["barber"], shop["service"], on_date, time)


def test_second_accept_on_same_slot_refused(svc, shop, session):
    c1, c2, _ = shop["customers"]
    a = svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    b = svc.request_booking(c2, shop["barber"], shop["service"], TOMORROW, "09:00")
    svc.accept(a.id, shop["barber"].id)

    # simulate a stale pending row the batch reject never reached
    row = session.get(Booking, b.id)
    row.status = "pending"
    session.add(row)
    session.commit()

    with pytest.raises(SlotUnavailable):
        svc.accept(b.id, shop["barber"].id)
    assert svc.bookings.get(b.id).status == BookingStatus.pending


def test_database_refuses_two_accepted_rows(svc, shop, session):
    c1, c2, _ = shop["customers"]
    a = svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    b = svc.request_booking(c2, shop["barber"], shop["service"], TOMORROW, "09:00")
    store = BookingStore(session)
    assert store.set_status(a.id, BookingStatus.accepted)
    with pytest.raises(IntegrityError):
        store.set_status(b.id, BookingStatus.accepted, strict=True)
    assert store.set_status(b.id, BookingStatus.accepted) is False


def test_partial_reject_failure_is_a_warning(svc, shop, monkeypatch):
    bookings = [
        svc.request_booking(c, shop["barber"], shop["service"], TOMORROW, "10:30")
        for c in shop["customers"]
    ]
    real_set_status = svc.bookings.set_status
    broken = bookings[2].id

    def flaky(booking_id, status, strict=False):
        if booking_id == broken and status == BookingStatus.rejected:
            return False
        return real_set_status(booking_id, status, strict=strict)

    monkeypatch.setattr(svc.bookings, "set_status", flaky)
    result = svc.accept(bookings[0].id, shop["barber"].id)

    assert result.booking.status == BookingStatus.accepted
    assert result.rejected_ids == [bookings[1].id]
    assert len(result.warnings) == 1
    assert str(broken) in result.warnings[0]

    # the stale pending row never makes the slot look free
    slots = {s.time: s for s in svc.slots_for(shop["barber"], TOMORROW, shop["customers"][1])}
    assert slots["10:30"].is_taken


def test_accept_requires_pending_and_ownership(svc, shop):
    booking = svc.request_booking(shop["customers"][0], shop["barber"], shop["service"], TOMORROW, "09:00")
    with pytest.raises(Forbidden):
        svc.accept(booking.id, shop["barber"].id + 1)
    svc.reject(booking.id, shop["barber"].id)
    with pytest.raises(InvalidTransition):
        svc.accept(booking.id, shop["barber"].id)
    with pytest.raises(NotFound):
        svc.accept(9999, shop["barber"].id)


def test_complete_and_no_show_follow_accept(svc, shop):
    c1, c2, _ = shop["customers"]
    a = svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    b = svc.request_booking(c2, shop["barber"], shop["service"], TOMORROW, "09:45")
    with pytest.raises(InvalidTransition):
        svc.complete(a.id, shop["barber"].id)
    svc.accept(a.id, shop["barber"].id)
    svc.accept(b.id, shop["barber"].id)
    assert svc.complete(a.id, shop["barber"].id).status == BookingStatus.completed
    assert svc.mark_no_show(b.id, shop["barber"].id).status == BookingStatus.no_show


def test_cancel_is_idempotent(svc, shop):
    c1 = shop["customers"][0]
    booking = svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    first = svc.cancel(booking.id, c1)
    second = svc.cancel(booking.id, c1)
    assert first.status == second.status == BookingStatus.cancelled


def test_cancel_inside_notice_window_refused(svc, shop, clock):
    c1 = shop["customers"][0]
    booking = svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    svc.accept(booking.id, shop["barber"].id)
    clock.instant = clock.instant + timedelta(hours=17, minutes=30)  # 03:30 next day
    with pytest.raises(PolicyViolation, match="6 hours"):
        svc.cancel(booking.id, c1)
    assert svc.bookings.get(booking.id).status == BookingStatus.accepted


def test_cancel_completed_refused(svc, shop):
    c1 = shop["customers"][0]
    booking = svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    svc.accept(booking.id, shop["barber"].id)
    svc.complete(booking.id, shop["barber"].id)
    with pytest.raises(PolicyViolation, match="already completed"):
        svc.cancel(booking.id, c1)


def test_barber_can_cancel_and_strangers_cannot(svc, shop):
    c1, c2, _ = shop["customers"]
    booking = svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    with pytest.raises(Forbidden):
        svc.cancel(booking.id, c2)
    cancelled = svc.cancel(booking.id, user_id=-1, barber_id=shop["barber"].id)
    assert cancelled.status == BookingStatus.cancelled


def test_cancelled_slot_is_free_again(svc, shop):
    c1, c2, _ = shop["customers"]
    booking = svc.request_booking(c1, shop["barber"], shop["service"], TOMORROW, "09:00")
    svc.accept(booking.id, shop["barber"].id)
    svc.cancel(booking.id, c1)
    again = svc.request_booking(c2, shop["barber"], shop["service"], TOMORROW, "09:00")
    assert svc.accept(again.id, shop["barber"].id).booking.status == BookingStatus.accepted


def test_snapshot_refresh_sees_new_rows(session, shop, svc):
    store = BookingStore(session)
    snapshot = BookingSnapshot(store, shop["barber"].id, TOMORROW)
    assert snapshot.bookings == []
    svc.request_booking(shop["customers"][0], shop["barber"], shop["service"], TOMORROW, "09:00")
    assert snapshot.bookings == []
    assert len(snapshot.refresh()) == 1
    assert len(snapshot.at("09:00")) == 1


def test_unreadable_stored_schedule_means_no_slots(session, shop, svc):
    barber = shop["barber"]
    barber.working_hours = [{"day": "Wednesday", "start_time": "nine", "end_time": "17:00"}]
    session.add(barber)
    session.commit()
    assert ScheduleStore(session).get_schedule_config(barber.id) is None
    assert svc.slots_for(barber, TOMORROW, None) == []


def test_booking_round_trips_date_and_time_strings(session, shop, svc):
    booking = svc.request_booking(shop["customers"][0], shop["barber"], shop["service"], TOMORROW, "09:45")
    row = session.get(Booking, booking.id)
    assert row.date == "2024-01-11"
    assert row.time == "09:45"
    assert row.status == "pending"
    assert row.price == 20
