# barbershop/slots.py

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from fastapi import HTTPException
from sqlalchemy import and_
from sqlmodel import Session, select

from barbershop.config import settings
from barbershop.core import overlaps, time_to_minutes, minutes_to_time
from barbershop.deps import get_active_shop, is_active_barber
from barbershop.models import Shop, ShopBarber, Slot, User, WorkingHours

logger = logging.getLogger(__name__)


def generate_slots_for_day(working_hours: WorkingHours) -> List[Tuple[str, str]]:
    """Fixed-duration (start, end) pairs inside working hours, minus the break."""
    step = working_hours.slot_duration
    start = time_to_minutes(working_hours.start_time)
    end = time_to_minutes(working_hours.end_time)

    break_start = break_end = None
    if working_hours.break_start_time and working_hours.break_end_time:
        break_start = time_to_minutes(working_hours.break_start_time)
        break_end = time_to_minutes(working_hours.break_end_time)

    pairs = []
    minutes = start
    while minutes + step <= end:
        slot_end = minutes + step
        if break_start is None or not overlaps(minutes, slot_end, break_start, break_end):
            pairs.append((minutes_to_time(minutes), minutes_to_time(slot_end)))
        minutes += step
    return pairs


def _has_slots_on(session: Session, barber_id: int, day: date) -> bool:
    existing = session.exec(
        select(Slot.id)
        .where(Slot.barber_id == barber_id)
        .where(Slot.date == day)
    ).first()
    return existing is not None


def _fill_range(
    session: Session,
    barber_id: int,
    shop_id: int,
    hours_by_day: dict,
    start_date: date,
    end_date: date,
) -> List[Slot]:
    created = []
    day = start_date
    while day <= end_date:
        working_hours = hours_by_day.get(day.weekday())
        # days that already have slots are left alone
        if working_hours is not None and not _has_slots_on(session, barber_id, day):
            for start_time, end_time in generate_slots_for_day(working_hours):
                slot = Slot(
                    barber_id=barber_id,
                    shop_id=shop_id,
                    date=day,
                    start_time=start_time,
                    end_time=end_time,
                    estimated_duration=working_hours.slot_duration,
                )
                session.add(slot)
                created.append(slot)
        day += timedelta(days=1)
    return created


def _available_hours(session: Session, barber_id: int) -> dict:
    rows = session.exec(
        select(WorkingHours)
        .where(WorkingHours.barber_id == barber_id)
        .where(WorkingHours.is_available == True)  # noqa: E712
    ).all()
    return {row.day_of_week: row for row in rows}


def generate_slots(
    session: Session,
    barber_id: int,
    shop_id: Optional[int],
    start_date: date,
    end_date: date,
    today: Optional[date] = None,
) -> List[Slot]:
    today = today or date.today()

    if start_date < today:
        raise HTTPException(status_code=400, detail="Cannot generate slots for past dates")
    if end_date <= start_date:
        raise HTTPException(status_code=400, detail="End date must be after start date")
    if (end_date - start_date).days > settings.MAX_SLOT_GENERATION_DAYS:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot generate slots for more than {settings.MAX_SLOT_GENERATION_DAYS} days at once",
        )

    hours_by_day = _available_hours(session, barber_id)
    if not hours_by_day:
        raise HTTPException(status_code=400, detail="No working hours set for this barber")

    if shop_id is None:
        shop_id = next(iter(hours_by_day.values())).shop_id
    get_active_shop(session, shop_id)
    if not is_active_barber(session, shop_id, barber_id):
        raise HTTPException(status_code=403, detail="Barber does not work at this shop")

    created = _fill_range(session, barber_id, shop_id, hours_by_day, start_date, end_date)
    session.commit()
    for slot in created:
        session.refresh(slot)

    logger.info(
        "Generated %d slots for barber %s between %s and %s",
        len(created), barber_id, start_date, end_date,
    )
    return created


def auto_generate_slots(session: Session, days: Optional[int] = None, today: Optional[date] = None) -> int:
    """Generate the next `days` days of slots for every active barber with working hours."""
    days = settings.AUTO_GENERATE_SLOT_DAYS if days is None else days
    today = today or date.today()
    end_date = today + timedelta(days=days)

    rows = session.exec(
        select(WorkingHours, User, Shop)
        .join(User, User.id == WorkingHours.barber_id)
        .join(Shop, Shop.id == WorkingHours.shop_id)
        .join(ShopBarber, and_(
            ShopBarber.user_id == WorkingHours.barber_id,
            ShopBarber.shop_id == WorkingHours.shop_id,
        ))
        .where(WorkingHours.is_available == True)  # noqa: E712
        .where(User.is_active == True)  # noqa: E712
        .where(Shop.is_active == True)  # noqa: E712
        .where(ShopBarber.is_active == True)  # noqa: E712
    ).all()

    if not rows:
        logger.warning("No working hours found for any barber")
        return 0

    per_barber = {}
    for working_hours, _user, shop in rows:
        entry = per_barber.setdefault(working_hours.barber_id, {"shop_id": shop.id, "hours": {}})
        entry["hours"][working_hours.day_of_week] = working_hours

    total = 0
    for barber_id, entry in per_barber.items():
        created = _fill_range(session, barber_id, entry["shop_id"], entry["hours"], today, end_date)
        total += len(created)
    session.commit()

    logger.info("Auto slot generation completed, %d slots created", total)
    return total


def available_slots(
    session: Session,
    barber_id: int,
    day: date,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> List[Slot]:
    now = now or datetime.now()
    today = today or now.date()
    if day < today:
        raise HTTPException(status_code=400, detail="Cannot get slots for past dates")

    stmt = (
        select(Slot)
        .where(Slot.barber_id == barber_id)
        .where(Slot.date == day)
        .where(Slot.status == "available")
        .where(Slot.is_booked == False)  # noqa: E712
    )
    # slots that already started today can no longer be booked
    if day == now.date():
        stmt = stmt.where(Slot.start_time > now.strftime("%H:%M"))
    return session.exec(stmt.order_by(Slot.start_time)).all()
