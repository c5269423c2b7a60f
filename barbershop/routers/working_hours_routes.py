# barbershop/routers/working_hours_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import ShopBarber, WorkingHours
from barbershop.schemas import Message, WorkingHoursPublic, WorkingHoursSet
from barbershop.auth import get_current_user
from barbershop.core import time_to_minutes
from barbershop.deps import get_active_shop, require_role

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/working-hours",
    tags=["working-hours"],
)


def _check_day(day_of_week: int):
    if not (0 <= day_of_week <= 6):
        raise HTTPException(status_code=400, detail="Day of week must be between 0 (Monday) and 6 (Sunday)")


def _works_at(session: Session, user: dict, shop) -> bool:
    if shop.owner_id == user["id"] or user["shop_id"] == shop.id:
        return True
    link = session.exec(
        select(ShopBarber)
        .where(ShopBarber.shop_id == shop.id)
        .where(ShopBarber.user_id == user["id"])
        .where(ShopBarber.is_active == True)  # noqa: E712
    ).first()
    return link is not None


@router.get("", response_model=List[WorkingHoursPublic])
def my_working_hours(
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "barber")
    return session.exec(
        select(WorkingHours)
        .where(WorkingHours.barber_id == current_user["id"])
        .order_by(WorkingHours.day_of_week)
    ).all()


@router.put("/{day_of_week}", response_model=WorkingHoursPublic)
def set_working_hours(
    day_of_week: int,
    body: WorkingHoursSet,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "barber")

    # 1) Validate the day and the time window
    _check_day(day_of_week)
    start = time_to_minutes(body.start_time)
    end = time_to_minutes(body.end_time)
    if start >= end:
        raise HTTPException(status_code=400, detail="End time must be after start time")

    if (body.break_start_time is None) != (body.break_end_time is None):
        raise HTTPException(status_code=400, detail="Break start and end must be set together")
    if body.break_start_time is not None:
        break_start = time_to_minutes(body.break_start_time)
        break_end = time_to_minutes(body.break_end_time)
        if break_start >= break_end:
            raise HTTPException(status_code=400, detail="Break end time must be after break start time")
        if break_start < start or break_end > end:
            raise HTTPException(status_code=400, detail="Break time must be within working hours")

    # 2) Resolve the shop the barber works at
    shop_id = body.shop_id if body.shop_id is not None else current_user["shop_id"]
    if shop_id is None:
        raise HTTPException(status_code=400, detail="You must belong to a shop to set working hours")
    shop = get_active_shop(session, shop_id)
    if not _works_at(session, current_user, shop):
        raise HTTPException(status_code=403, detail="You can only set working hours for your own shop")

    # 3) Upsert: one row per barber and weekday
    row = session.exec(
        select(WorkingHours)
        .where(WorkingHours.barber_id == current_user["id"])
        .where(WorkingHours.day_of_week == day_of_week)
    ).first()

    values = body.model_dump(exclude={"shop_id"})
    if row is None:
        row = WorkingHours(barber_id=current_user["id"], shop_id=shop.id, day_of_week=day_of_week, **values)
    else:
        for field, value in values.items():
            setattr(row, field, value)
        row.shop_id = shop.id

    session.add(row)
    session.commit()
    session.refresh(row)
    logger.info("Working hours for barber %s day %s set to %s-%s", current_user["id"], day_of_week, row.start_time, row.end_time)
    return row


@router.delete("/{day_of_week}", response_model=Message)
def delete_working_hours(
    day_of_week: int,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "barber")
    _check_day(day_of_week)

    row = session.exec(
        select(WorkingHours)
        .where(WorkingHours.barber_id == current_user["id"])
        .where(WorkingHours.day_of_week == day_of_week)
    ).first()
    if row is None:
        raise HTTPException(status_code=404, detail="Working hours not found for this day")

    session.delete(row)
    session.commit()
    return {"message": "Working hours deleted successfully"}


@router.get("/barber/{barber_id}", response_model=List[WorkingHoursPublic])
def barber_working_hours(barber_id: int, session: Session = Depends(get_session)):
    return session.exec(
        select(WorkingHours)
        .where(WorkingHours.barber_id == barber_id)
        .where(WorkingHours.is_available == True)  # noqa: E712
        .order_by(WorkingHours.day_of_week)
    ).all()
