# barbershop/routers/shops_routes.py

import logging
from datetime import datetime, date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlmodel import Session, select

from barbershop.data import DEFAULT_SHOP_HOURS, WEEKDAYS
from barbershop.db import get_session
from barbershop.models import Booking, FavoriteShop, Service, Shop, ShopBarber, Slot, User
from barbershop.schemas import (
    BarberCreate,
    BarberPublic,
    Message,
    Page,
    QueueStatus,
    ServiceCreate,
    ServicePublic,
    ServiceUpdate,
    ShopCreate,
    ShopPublic,
    ShopUpdate,
)
from barbershop.auth import get_current_user, hash_password
from barbershop.core import ACTIVE_BOOKING_STATUSES, paginate
from barbershop.deps import (
    barber_public,
    find_owned_shop,
    get_active_shop,
    get_managed_shop,
    require_role,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/shops",
    tags=["shops"],
)


def _weekly_hours(working_hours: dict) -> dict:
    unknown = set(working_hours) - set(WEEKDAYS)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown weekday: {', '.join(sorted(unknown))}")
    return {day: hours.model_dump() for day, hours in working_hours.items()}


@router.get("", response_model=Page[ShopPublic])
def list_shops(
    city: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session),
):
    conditions = [Shop.is_active == True]  # noqa: E712
    if city:
        conditions.append(Shop.city.ilike(f"%{city}%"))
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(Shop.name.ilike(pattern), Shop.description.ilike(pattern)))

    total = session.exec(select(func.count()).select_from(Shop).where(*conditions)).one()
    shops = session.exec(
        select(Shop)
        .where(*conditions)
        .order_by(Shop.rating_average.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return {
        "count": len(shops),
        "total": total,
        "pagination": paginate(total, page, limit),
        "data": shops,
    }


@router.get("/my-shop", response_model=ShopPublic)
def my_shop(
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "shop_owner", "barber")

    shop = find_owned_shop(session, current_user["id"])
    if shop is None and current_user["shop_id"] is not None:
        shop = session.get(Shop, current_user["shop_id"])
    if shop is None or not shop.is_active:
        raise HTTPException(status_code=404, detail="You do not have a shop registered")
    return shop


@router.get("/favorites", response_model=List[ShopPublic])
def favorite_shops(
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "customer")

    return session.exec(
        select(Shop)
        .join(FavoriteShop, FavoriteShop.shop_id == Shop.id)
        .where(FavoriteShop.user_id == current_user["id"])
        .where(Shop.is_active == True)  # noqa: E712
        .order_by(FavoriteShop.created_at.desc())
    ).all()


@router.get("/{shop_id}", response_model=ShopPublic)
def get_shop(shop_id: int, session: Session = Depends(get_session)):
    return get_active_shop(session, shop_id)


@router.post("", status_code=201, response_model=ShopPublic)
def create_shop(
    body: ShopCreate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "shop_owner", "barber", "admin")

    # 1) One active shop per owner
    if current_user["role"] != "admin":
        existing = find_owned_shop(session, current_user["id"])
        if existing is not None:
            raise HTTPException(status_code=400, detail="You already have a shop registered")

    # 2) Shop row
    data = body.model_dump(exclude={"services", "working_hours"})
    working_hours = (
        _weekly_hours(body.working_hours)
        if body.working_hours
        else {day: dict(hours) for day, hours in DEFAULT_SHOP_HOURS.items()}
    )
    shop = Shop(owner_id=current_user["id"], working_hours=working_hours, **data)
    session.add(shop)
    session.flush()  # fills shop.id

    # 3) Inline services
    for service in body.services:
        session.add(Service(shop_id=shop.id, **service.model_dump(mode="json")))

    # 4) Owner points at the shop; a barber-owner is also bookable there
    owner = session.get(User, current_user["id"])
    owner.shop_id = shop.id
    session.add(owner)
    if current_user["role"] == "barber":
        session.add(ShopBarber(shop_id=shop.id, user_id=owner.id, specialties=owner.specialties or []))

    session.commit()
    session.refresh(shop)
    logger.info("Shop %s created by user %s with %d services", shop.id, current_user["id"], len(body.services))
    return shop


@router.put("/{shop_id}", response_model=ShopPublic)
def update_shop(
    shop_id: int,
    body: ShopUpdate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    shop = get_managed_shop(session, shop_id, current_user, "update")

    changes = body.model_dump(exclude_unset=True, exclude={"working_hours"})
    for field, value in changes.items():
        setattr(shop, field, value)
    if body.working_hours is not None:
        shop.working_hours = _weekly_hours(body.working_hours)
    shop.updated_at = datetime.now()

    session.add(shop)
    session.commit()
    session.refresh(shop)
    return shop


@router.delete("/{shop_id}", response_model=Message)
def delete_shop(
    shop_id: int,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    shop = get_managed_shop(session, shop_id, current_user, "delete")

    shop.is_active = False
    shop.updated_at = datetime.now()
    session.add(shop)

    owner = session.get(User, shop.owner_id)
    if owner is not None and owner.shop_id == shop.id:
        owner.shop_id = None
        session.add(owner)

    session.commit()
    logger.info("Shop %s deactivated by user %s", shop_id, current_user["id"])
    return {"message": "Shop deleted successfully"}


# --- favorites ---

@router.post("/{shop_id}/favorite", response_model=Message)
def add_favorite(
    shop_id: int,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "customer")
    get_active_shop(session, shop_id)

    if session.get(FavoriteShop, (current_user["id"], shop_id)) is not None:
        raise HTTPException(status_code=400, detail="Shop already in favorites")

    session.add(FavoriteShop(user_id=current_user["id"], shop_id=shop_id))
    session.commit()
    return {"message": "Shop added to favorites"}


@router.delete("/{shop_id}/favorite", response_model=Message)
def remove_favorite(
    shop_id: int,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "customer")

    favorite = session.get(FavoriteShop, (current_user["id"], shop_id))
    if favorite is None:
        raise HTTPException(status_code=400, detail="Shop not in favorites")

    session.delete(favorite)
    session.commit()
    return {"message": "Shop removed from favorites"}


# --- services ---

@router.get("/{shop_id}/services", response_model=List[ServicePublic])
def shop_services(shop_id: int, session: Session = Depends(get_session)):
    get_active_shop(session, shop_id)
    return session.exec(
        select(Service)
        .where(Service.shop_id == shop_id)
        .where(Service.is_active == True)  # noqa: E712
        .order_by(Service.category, Service.name)
    ).all()


@router.post("/{shop_id}/services", status_code=201, response_model=ServicePublic)
def add_shop_service(
    shop_id: int,
    body: ServiceCreate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    get_managed_shop(session, shop_id, current_user, "add services to")

    service = Service(shop_id=shop_id, **body.model_dump(mode="json"))
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@router.put("/{shop_id}/services/{service_id}", response_model=ServicePublic)
def update_shop_service(
    shop_id: int,
    service_id: int,
    body: ServiceUpdate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    get_managed_shop(session, shop_id, current_user, "update services for")

    service = session.get(Service, service_id)
    if service is None or service.shop_id != shop_id:
        raise HTTPException(status_code=404, detail="Service not found")

    for field, value in body.model_dump(mode="json", exclude_unset=True).items():
        setattr(service, field, value)
    service.updated_at = datetime.now()
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@router.delete("/{shop_id}/services/{service_id}", response_model=Message)
def delete_shop_service(
    shop_id: int,
    service_id: int,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    get_managed_shop(session, shop_id, current_user, "delete services from")

    service = session.get(Service, service_id)
    if service is None or service.shop_id != shop_id:
        raise HTTPException(status_code=404, detail="Service not found")

    service.is_active = False
    session.add(service)
    session.commit()
    return {"message": "Service deleted successfully"}


# --- barbers ---

@router.get("/{shop_id}/barbers", response_model=List[BarberPublic])
def shop_barbers(shop_id: int, session: Session = Depends(get_session)):
    get_active_shop(session, shop_id)
    rows = session.exec(
        select(User, ShopBarber)
        .join(ShopBarber, ShopBarber.user_id == User.id)
        .where(ShopBarber.shop_id == shop_id)
        .where(ShopBarber.is_active == True)  # noqa: E712
        .where(User.is_active == True)  # noqa: E712
        .order_by(User.name)
    ).all()
    return [barber_public(user, link) for user, link in rows]


@router.post("/{shop_id}/barbers", status_code=201, response_model=BarberPublic)
def add_barber(
    shop_id: int,
    body: BarberCreate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    shop = get_managed_shop(session, shop_id, current_user, "add barbers to")

    email = body.email.lower()
    existing = session.exec(
        select(User).where(or_(User.email == email, User.phone == body.phone))
    ).first()
    if existing is not None:
        field = "email" if existing.email == email else "phone"
        raise HTTPException(status_code=400, detail=f"User with this {field} already exists")

    barber = User(
        name=body.name,
        email=email,
        phone=body.phone,
        password_hash=hash_password(body.password),
        role="barber",
        shop_id=shop.id,
        specialties=body.specialties,
        experience=body.experience,
    )
    session.add(barber)
    session.flush()

    link = ShopBarber(
        shop_id=shop.id,
        user_id=barber.id,
        specialties=body.specialties,
        experience=body.experience,
    )
    session.add(link)
    session.commit()
    session.refresh(barber)
    session.refresh(link)
    logger.info("Barber %s added to shop %s", barber.id, shop.id)
    return barber_public(barber, link)


@router.delete("/{shop_id}/barbers/{user_id}", response_model=Message)
def remove_barber(
    shop_id: int,
    user_id: int,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    get_managed_shop(session, shop_id, current_user, "remove barbers from")

    link = session.exec(
        select(ShopBarber)
        .where(ShopBarber.shop_id == shop_id)
        .where(ShopBarber.user_id == user_id)
    ).first()
    if link is None or not link.is_active:
        raise HTTPException(status_code=404, detail="Barber not found in this shop")

    link.is_active = False
    session.add(link)

    barber = session.get(User, user_id)
    if barber is not None and barber.shop_id == shop_id:
        barber.shop_id = None
        session.add(barber)

    # open slots from today on are withdrawn; booked ones stay for the existing bookings
    open_slots = session.exec(
        select(Slot)
        .where(Slot.barber_id == user_id)
        .where(Slot.shop_id == shop_id)
        .where(Slot.date >= date.today())
        .where(Slot.status == "available")
    ).all()
    for slot in open_slots:
        slot.status = "blocked"
        session.add(slot)

    session.commit()
    logger.info("Barber %s removed from shop %s, %d open slots blocked", user_id, shop_id, len(open_slots))
    return {"message": "Barber removed from shop"}


# --- queue ---

@router.get("/{shop_id}/queue", response_model=QueueStatus)
def shop_queue(shop_id: int, session: Session = Depends(get_session)):
    shop = get_active_shop(session, shop_id)

    now = datetime.now()
    rows = session.exec(
        select(Booking, Slot)
        .join(Slot, Slot.id == Booking.slot_id)
        .where(Booking.shop_id == shop_id)
        .where(Booking.status.in_(ACTIVE_BOOKING_STATUSES))
        .where(Slot.date == date.today())
    ).all()

    current_time = now.strftime("%H:%M")
    waiting = [booking for booking, slot in rows if slot.end_time > current_time]

    return {
        "shop_id": shop.id,
        "count": len(waiting),
        "estimated_wait_time": len(waiting) * (shop.slot_duration + shop.buffer_time),
        "last_updated": now,
    }
