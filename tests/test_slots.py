from datetime import date, datetime, time, timedelta

import pytest
from fastapi import HTTPException
from sqlmodel import select

from barbershop.models import Shop, ShopBarber, Slot, User, WorkingHours
from barbershop.slots import (
    auto_generate_slots,
    available_slots,
    generate_slots,
    generate_slots_for_day,
)

TODAY = date(2030, 1, 7)  # a Monday


def _hours(**overrides):
    values = {
        "barber_id": 1,
        "shop_id": 1,
        "day_of_week": 0,
        "start_time": "09:00",
        "end_time": "12:00",
        "slot_duration": 30,
    }
    values.update(overrides)
    return WorkingHours(**values)


@pytest.fixture
def barber_shop(session):
    owner = User(name="Owner", email="o@example.com", phone="+15550000001", password_hash="x", role="shop_owner")
    barber = User(name="Barber", email="b@example.com", phone="+15550000002", password_hash="x", role="barber")
    session.add(owner)
    session.add(barber)
    session.commit()
    shop = Shop(
        owner_id=owner.id, name="Shop", street="1 Main St", city="Town", state="ST",
        zip_code="12345", phone="+15550000003", email="shop@example.com",
    )
    session.add(shop)
    session.commit()
    barber.shop_id = shop.id
    session.add(barber)
    session.add(ShopBarber(shop_id=shop.id, user_id=barber.id))
    session.commit()
    return barber, shop


def _set_hours(session, barber, shop, days=range(7), **overrides):
    for day in days:
        session.add(_hours(barber_id=barber.id, shop_id=shop.id, day_of_week=day, **overrides))
    session.commit()


def test_day_slots_walk_in_fixed_steps():
    assert generate_slots_for_day(_hours()) == [
        ("09:00", "09:30"),
        ("09:30", "10:00"),
        ("10:00", "10:30"),
        ("10:30", "11:00"),
        ("11:00", "11:30"),
        ("11:30", "12:00"),
    ]


def test_day_slots_skip_break_window():
    pairs = generate_slots_for_day(_hours(break_start_time="10:00", break_end_time="11:00"))
    starts = [start for start, _ in pairs]
    assert starts == ["09:00", "09:30", "11:00", "11:30"]


def test_day_slots_may_end_exactly_at_close():
    pairs = generate_slots_for_day(_hours(end_time="10:45", slot_duration=45))
    assert pairs == [("09:00", "09:45"), ("09:45", "10:30")]


def test_day_slots_stop_before_running_past_end():
    pairs = generate_slots_for_day(_hours(end_time="10:15", slot_duration=45))
    assert pairs == [("09:00", "09:45")]


def test_generate_rejects_past_start(session, barber_shop):
    barber, shop = barber_shop
    with pytest.raises(HTTPException) as exc:
        generate_slots(session, barber.id, shop.id, TODAY - timedelta(days=1), TODAY + timedelta(days=1), today=TODAY)
    assert exc.value.status_code == 400


def test_generate_rejects_end_not_after_start(session, barber_shop):
    barber, shop = barber_shop
    with pytest.raises(HTTPException) as exc:
        generate_slots(session, barber.id, shop.id, TODAY, TODAY, today=TODAY)
    assert exc.value.detail == "End date must be after start date"


def test_generate_rejects_long_ranges(session, barber_shop):
    barber, shop = barber_shop
    with pytest.raises(HTTPException) as exc:
        generate_slots(session, barber.id, shop.id, TODAY, TODAY + timedelta(days=31), today=TODAY)
    assert "30 days" in exc.value.detail


def test_generate_requires_working_hours(session, barber_shop):
    barber, shop = barber_shop
    with pytest.raises(HTTPException) as exc:
        generate_slots(session, barber.id, shop.id, TODAY, TODAY + timedelta(days=1), today=TODAY)
    assert exc.value.detail == "No working hours set for this barber"


def test_generate_only_fills_working_days(session, barber_shop):
    barber, shop = barber_shop
    _set_hours(session, barber, shop, days=[0, 2])  # Monday, Wednesday

    created = generate_slots(session, barber.id, None, TODAY, TODAY + timedelta(days=6), today=TODAY)

    assert len(created) == 12
    assert {slot.date.weekday() for slot in created} == {0, 2}
    assert all(slot.shop_id == shop.id for slot in created)


def test_generate_skips_days_that_already_have_slots(session, barber_shop):
    barber, shop = barber_shop
    _set_hours(session, barber, shop)

    first = generate_slots(session, barber.id, shop.id, TODAY, TODAY + timedelta(days=1), today=TODAY)
    second = generate_slots(session, barber.id, shop.id, TODAY, TODAY + timedelta(days=2), today=TODAY)

    assert len(first) == 12
    assert len(second) == 6
    assert second[0].date == TODAY + timedelta(days=2)


def test_auto_generate_ignores_inactive_shops(session, barber_shop):
    barber, shop = barber_shop
    _set_hours(session, barber, shop)

    assert auto_generate_slots(session, days=1, today=TODAY) == 12

    shop.is_active = False
    session.add(shop)
    session.commit()
    assert auto_generate_slots(session, days=3, today=TODAY) == 0


def test_generate_rejects_shop_the_barber_does_not_work_at(session, barber_shop):
    barber, shop = barber_shop
    _set_hours(session, barber, shop)
    other = Shop(
        owner_id=shop.owner_id, name="Other", street="2 Main St", city="Town", state="ST",
        zip_code="12345", phone="+15550000004", email="other@example.com",
    )
    session.add(other)
    session.commit()

    with pytest.raises(HTTPException) as exc:
        generate_slots(session, barber.id, other.id, TODAY, TODAY + timedelta(days=1), today=TODAY)
    assert exc.value.status_code == 403
    assert session.exec(select(Slot)).all() == []


def test_auto_generate_skips_removed_barbers(session, barber_shop):
    barber, shop = barber_shop
    _set_hours(session, barber, shop)
    link = session.exec(select(ShopBarber).where(ShopBarber.user_id == barber.id)).one()
    link.is_active = False
    session.add(link)
    session.commit()

    assert auto_generate_slots(session, days=3, today=TODAY) == 0


def test_auto_generate_without_hours_is_a_noop(session):
    assert auto_generate_slots(session, today=TODAY) == 0


def test_available_slots_exclude_booked_and_blocked(session, barber_shop):
    barber, shop = barber_shop
    _set_hours(session, barber, shop)
    slots = generate_slots(session, barber.id, shop.id, TODAY, TODAY + timedelta(days=1), today=TODAY)

    slots[0].is_booked = True
    slots[0].status = "booked"
    slots[1].status = "blocked"
    session.add(slots[0])
    session.add(slots[1])
    session.commit()

    free = available_slots(session, barber.id, TODAY, today=TODAY)
    assert [slot.start_time for slot in free] == ["10:00", "10:30", "11:00", "11:30"]


def test_available_slots_today_skip_started_slots(session, barber_shop):
    barber, shop = barber_shop
    _set_hours(session, barber, shop)
    generate_slots(session, barber.id, shop.id, TODAY, TODAY + timedelta(days=1), today=TODAY)

    free = available_slots(session, barber.id, TODAY, now=datetime.combine(TODAY, time(10, 15)))
    assert [slot.start_time for slot in free] == ["10:30", "11:00", "11:30"]

    free = available_slots(session, barber.id, TODAY + timedelta(days=1), now=datetime.combine(TODAY, time(10, 15)))
    assert len(free) == 6


def test_available_slots_reject_past_dates(session, barber_shop):
    barber, _ = barber_shop
    with pytest.raises(HTTPException) as exc:
        available_slots(session, barber.id, TODAY - timedelta(days=1), today=TODAY)
    assert exc.value.status_code == 400


def test_slot_rows_are_unique_per_barber_and_start(session, barber_shop):
    barber, shop = barber_shop
    _set_hours(session, barber, shop)
    generate_slots(session, barber.id, shop.id, TODAY, TODAY + timedelta(days=1), today=TODAY)

    rows = session.exec(select(Slot).where(Slot.date == TODAY)).all()
    assert len({row.start_time for row in rows}) == len(rows)
