# barbershop/routers/bookings_routes.py

import logging
from datetime import datetime, timedelta, date
from typing import Optional, List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy import func, update
from sqlmodel import Session, select

from barbershop.config import settings
from barbershop.db import get_session
from barbershop.models import Booking, BookingService, Service, Shop, Slot, User
from barbershop.notifications import send_booking_email
from barbershop.schemas import (
    BookingCancel,
    BookingCreate,
    BookingPublic,
    BookingReview,
    BookingStatus,
    BookingStatusUpdate,
    Page,
)
from barbershop.auth import get_current_user
from barbershop.core import can_transition, paginate, slot_start
from barbershop.deps import find_owned_shop, get_managed_shop, is_active_barber, require_role

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/bookings",
    tags=["bookings"],
)

STATUS_EVENTS = {
    "confirmed": "confirmed",
    "cancelled": "cancelled",
    "completed": "completed",
}


def booking_to_public(session: Session, booking: Booking) -> dict:
    slot = session.get(Slot, booking.slot_id)
    rows = session.exec(
        select(BookingService, Service)
        .join(Service, Service.id == BookingService.service_id)
        .where(BookingService.booking_id == booking.id)
    ).all()

    data = booking.model_dump()
    data.update(
        date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        services=[
            {"service_id": service.id, "name": service.name, "price": line.price, "duration": service.duration}
            for line, service in rows
        ],
    )
    return data


def _email_context(session: Session, booking: Booking) -> dict:
    # plain values only: the background task runs after the session is closed
    public = booking_to_public(session, booking)
    customer = session.get(User, booking.customer_id)
    barber = session.get(User, booking.barber_id)
    shop = session.get(Shop, booking.shop_id)
    return {
        "booking_id": booking.id,
        "customer_email": customer.email if customer else None,
        "barber_email": barber.email if barber else None,
        "barber_name": barber.name if barber else None,
        "shop_name": shop.name if shop else None,
        "date": public["date"].isoformat(),
        "start_time": public["start_time"],
        "end_time": public["end_time"],
        "services": [item["name"] for item in public["services"]],
        "total_amount": booking.total_amount,
        "status": booking.status,
        "cancel_reason": booking.cancel_reason,
    }


def _get_booking(session: Session, booking_id: int) -> Booking:
    booking = session.get(Booking, booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


def _is_participant(session: Session, user: dict, booking: Booking) -> bool:
    if user["role"] == "admin" or user["id"] in (booking.customer_id, booking.barber_id):
        return True
    shop = session.get(Shop, booking.shop_id)
    return shop is not None and shop.owner_id == user["id"]


def _release_slot(session: Session, booking: Booking):
    slot = session.get(Slot, booking.slot_id)
    if slot is not None and slot.booking_id == booking.id:
        slot.is_booked = False
        slot.status = "available"
        slot.booked_by = None
        slot.booking_id = None
        session.add(slot)


def _apply_status(session: Session, booking: Booking, new_status: str, actor_id: int):
    now = datetime.now()
    booking.status = new_status
    booking.updated_at = now
    if new_status == "confirmed":
        booking.confirmed_at = now
    elif new_status == "completed":
        booking.completed_at = now
    elif new_status == "cancelled":
        booking.cancelled_at = now
        booking.cancelled_by = actor_id
        _release_slot(session, booking)
    session.add(booking)


def _paged(session: Session, conditions: list, page: int, limit: int) -> dict:
    total = session.exec(
        select(func.count())
        .select_from(Booking)
        .join(Slot, Slot.id == Booking.slot_id)
        .where(*conditions)
    ).one()
    bookings = session.exec(
        select(Booking)
        .join(Slot, Slot.id == Booking.slot_id)
        .where(*conditions)
        .order_by(Slot.date.desc(), Slot.start_time.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return {
        "count": len(bookings),
        "total": total,
        "pagination": paginate(total, page, limit),
        "data": [booking_to_public(session, booking) for booking in bookings],
    }


# --- listings ---

@router.get("", response_model=Page[BookingPublic])
def list_bookings(
    status: Optional[BookingStatus] = None,
    shop_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "admin")

    conditions = []
    if status is not None:
        conditions.append(Booking.status == status.value)
    if shop_id is not None:
        conditions.append(Booking.shop_id == shop_id)
    return _paged(session, conditions, page, limit)


@router.get("/my-bookings", response_model=List[BookingPublic])
def my_bookings(
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    bookings = session.exec(
        select(Booking)
        .where(Booking.customer_id == current_user["id"])
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    ).all()
    return [booking_to_public(session, booking) for booking in bookings]


@router.get("/customer", response_model=Page[BookingPublic])
def customer_bookings(
    status: Optional[BookingStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    conditions = [Booking.customer_id == current_user["id"]]
    if status is not None:
        conditions.append(Booking.status == status.value)
    return _paged(session, conditions, page, limit)


@router.get("/barber", response_model=Page[BookingPublic])
def barber_bookings(
    status: Optional[BookingStatus] = None,
    on_date: Optional[date] = Query(None, alias="date"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "barber", "shop_owner")

    if current_user["role"] == "barber":
        conditions = [Booking.barber_id == current_user["id"]]
    else:
        shop = find_owned_shop(session, current_user["id"])
        if shop is None:
            raise HTTPException(status_code=404, detail="You do not have a shop registered")
        conditions = [Booking.shop_id == shop.id]

    if status is not None:
        conditions.append(Booking.status == status.value)
    if on_date is not None:
        conditions.append(Slot.date == on_date)
    return _paged(session, conditions, page, limit)


@router.get("/shop/{shop_id}", response_model=Page[BookingPublic])
def shop_bookings(
    shop_id: int,
    status: Optional[BookingStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    get_managed_shop(session, shop_id, current_user, "view bookings for")

    conditions = [Booking.shop_id == shop_id]
    if status is not None:
        conditions.append(Booking.status == status.value)
    return _paged(session, conditions, page, limit)


@router.get("/{booking_id}", response_model=BookingPublic)
def get_booking(
    booking_id: int,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    booking = _get_booking(session, booking_id)
    if not _is_participant(session, current_user, booking):
        raise HTTPException(status_code=403, detail="Not authorized to view this booking")
    return booking_to_public(session, booking)


# --- lifecycle ---

@router.post("", status_code=201, response_model=BookingPublic)
def create_booking(
    body: BookingCreate,
    background_tasks: BackgroundTasks,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "customer")

    # 1) Slot must exist, be free and lie in the future
    slot = session.get(Slot, body.slot_id)
    if slot is None:
        raise HTTPException(status_code=404, detail="Slot not found")
    if slot.is_booked or slot.status != "available":
        raise HTTPException(status_code=409, detail="Slot is not available")
    if slot_start(slot.date, slot.start_time) < datetime.now():
        raise HTTPException(status_code=400, detail="Cannot book a slot in the past")

    # 2) Shop must take online bookings that far ahead
    shop = session.get(Shop, slot.shop_id)
    if shop is None or not shop.is_active:
        raise HTTPException(status_code=404, detail="Shop not found")
    if not is_active_barber(session, shop.id, slot.barber_id):
        raise HTTPException(status_code=409, detail="Barber is no longer available at this shop")
    if not shop.allow_online_booking:
        raise HTTPException(status_code=400, detail="This shop does not accept online bookings")
    if slot.date > date.today() + timedelta(days=shop.max_advance_booking_days):
        raise HTTPException(
            status_code=400,
            detail=f"Bookings can only be made up to {shop.max_advance_booking_days} days in advance",
        )

    # 3) Every service active and offered by this shop
    service_ids = list(dict.fromkeys(body.service_ids))
    services = session.exec(
        select(Service)
        .where(Service.id.in_(service_ids))
        .where(Service.shop_id == shop.id)
        .where(Service.is_active == True)  # noqa: E712
    ).all()
    if len(services) != len(service_ids):
        raise HTTPException(status_code=404, detail="One or more services not found")

    # 4) Claim the slot; only one concurrent request can flip it
    result = session.execute(
        update(Slot)
        .where(Slot.id == slot.id)
        .where(Slot.is_booked == False)  # noqa: E712
        .where(Slot.status == "available")
        .values(is_booked=True, status="booked", booked_by=current_user["id"])
    )
    if result.rowcount != 1:
        session.rollback()
        logger.warning("Slot %s claimed concurrently, rejecting booking by %s", slot.id, current_user["id"])
        raise HTTPException(status_code=409, detail="Slot is not available")

    # 5) Booking with a price snapshot per service
    booking = Booking(
        customer_id=current_user["id"],
        barber_id=slot.barber_id,
        shop_id=shop.id,
        slot_id=slot.id,
        total_amount=sum(service.price for service in services),
        payment_method=body.payment_method.value,
        notes=body.notes,
        customer_notes=body.customer_notes,
    )
    session.add(booking)
    session.flush()  # fills booking.id

    for service in services:
        session.add(BookingService(booking_id=booking.id, service_id=service.id, price=service.price))
        service.popularity += 1
        session.add(service)

    slot.booking_id = booking.id
    session.add(slot)
    session.commit()
    session.refresh(booking)
    logger.info("Booking %s created for slot %s by customer %s", booking.id, slot.id, current_user["id"])

    background_tasks.add_task(send_booking_email, "created", _email_context(session, booking))
    return booking_to_public(session, booking)


@router.put("/{booking_id}/status", response_model=BookingPublic)
def update_booking_status(
    booking_id: int,
    body: BookingStatusUpdate,
    background_tasks: BackgroundTasks,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "barber", "shop_owner", "admin")

    booking = _get_booking(session, booking_id)
    if current_user["role"] != "admin" and not _is_participant(session, current_user, booking):
        raise HTTPException(status_code=403, detail="Not authorized to update this booking")

    new_status = body.status.value
    if not can_transition(booking.status, new_status):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change booking status from {booking.status} to {new_status}",
        )

    if body.notes is not None:
        booking.notes = body.notes
    _apply_status(session, booking, new_status, current_user["id"])
    session.commit()
    session.refresh(booking)
    logger.info("Booking %s moved to %s by user %s", booking.id, new_status, current_user["id"])

    event = STATUS_EVENTS.get(new_status, "status_updated")
    background_tasks.add_task(send_booking_email, event, _email_context(session, booking))
    return booking_to_public(session, booking)


@router.delete("/{booking_id}", response_model=BookingPublic)
def cancel_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    body: Optional[BookingCancel] = None,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    booking = _get_booking(session, booking_id)

    if current_user["role"] == "customer":
        # 1) Customers: own booking, not started, outside the cutoff window
        if booking.customer_id != current_user["id"]:
            raise HTTPException(status_code=403, detail="Not authorized to cancel this booking")
        if booking.status not in ("pending", "confirmed"):
            raise HTTPException(status_code=400, detail=f"Cannot cancel a booking that is {booking.status}")

        slot = session.get(Slot, booking.slot_id)
        cutoff = timedelta(hours=settings.CANCELLATION_CUTOFF_HOURS)
        if slot_start(slot.date, slot.start_time) - datetime.now() < cutoff:
            raise HTTPException(
                status_code=400,
                detail=f"Bookings can only be cancelled at least {settings.CANCELLATION_CUTOFF_HOURS} hours in advance",
            )
    else:
        # 2) Staff: any non-terminal booking they take part in
        if not _is_participant(session, current_user, booking):
            raise HTTPException(status_code=403, detail="Not authorized to cancel this booking")
        if not can_transition(booking.status, "cancelled"):
            raise HTTPException(status_code=400, detail=f"Cannot cancel a booking that is {booking.status}")

    booking.cancel_reason = body.reason if body is not None else None
    _apply_status(session, booking, "cancelled", current_user["id"])
    session.commit()
    session.refresh(booking)
    logger.info("Booking %s cancelled by user %s", booking.id, current_user["id"])

    background_tasks.add_task(send_booking_email, "cancelled", _email_context(session, booking))
    return booking_to_public(session, booking)


@router.post("/{booking_id}/review", response_model=BookingPublic)
def review_booking(
    booking_id: int,
    body: BookingReview,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "customer")

    booking = _get_booking(session, booking_id)
    if booking.customer_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to review this booking")
    if booking.status != "completed":
        raise HTTPException(status_code=400, detail="You can only review completed bookings")
    if booking.rating is not None:
        raise HTTPException(status_code=400, detail="Booking has already been reviewed")

    booking.rating = body.rating
    booking.review = body.review
    booking.updated_at = datetime.now()
    session.add(booking)

    # running average over all reviews for the shop
    shop = session.get(Shop, booking.shop_id)
    if shop is not None:
        total = shop.rating_average * shop.rating_count + body.rating
        shop.rating_count += 1
        shop.rating_average = round(total / shop.rating_count, 2)
        session.add(shop)

    session.commit()
    session.refresh(booking)
    return booking_to_public(session, booking)
