# barbershop/routers/slots_routes.py

import logging
from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from barbershop.config import settings
from barbershop.db import get_session
from barbershop.models import Shop, ShopBarber, Slot, User
from barbershop.schemas import (
    BarberSlots,
    SlotBlock,
    SlotGenerate,
    SlotGenerateResult,
    SlotPublic,
    SlotStatus,
)
from barbershop.auth import get_current_user
from barbershop.deps import barber_public, get_active_shop, require_role
from barbershop.slots import auto_generate_slots, available_slots, generate_slots

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/slots",
    tags=["slots"],
)


def _owns_barber_shop(session: Session, owner_id: int, barber_id: int) -> bool:
    link = session.exec(
        select(ShopBarber)
        .join(Shop, Shop.id == ShopBarber.shop_id)
        .where(ShopBarber.user_id == barber_id)
        .where(Shop.owner_id == owner_id)
    ).first()
    return link is not None


@router.post("/generate", status_code=201, response_model=SlotGenerateResult)
def generate(
    body: SlotGenerate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "barber", "shop_owner", "admin")

    barber_id = body.barber_id if body.barber_id is not None else current_user["id"]
    if barber_id != current_user["id"]:
        if current_user["role"] == "barber":
            raise HTTPException(status_code=403, detail="Barbers can only generate their own slots")
        if current_user["role"] == "shop_owner" and not _owns_barber_shop(session, current_user["id"], barber_id):
            raise HTTPException(status_code=403, detail="Not authorized to generate slots for this barber")
    if current_user["role"] == "shop_owner" and body.shop_id is not None:
        shop = get_active_shop(session, body.shop_id)
        if shop.owner_id != current_user["id"]:
            raise HTTPException(status_code=403, detail="Not authorized to generate slots for this shop")

    # the barber must be an active member of the target shop, checked in generate_slots
    created = generate_slots(session, barber_id, body.shop_id, body.start_date, body.end_date)
    return {
        "slots_generated": len(created),
        "start_date": body.start_date,
        "end_date": body.end_date,
    }


@router.post("/auto-generate", response_model=SlotGenerateResult)
def auto_generate(
    days: Optional[int] = Query(None, ge=1),
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "admin")

    days = settings.AUTO_GENERATE_SLOT_DAYS if days is None else min(days, settings.MAX_SLOT_GENERATION_DAYS)
    today = date.today()
    total = auto_generate_slots(session, days=days, today=today)
    return {
        "slots_generated": total,
        "start_date": today,
        "end_date": today + timedelta(days=days),
    }


@router.get("/available/{barber_id}/{date}", response_model=List[SlotPublic])
def available(barber_id: int, date: date, session: Session = Depends(get_session)):
    return available_slots(session, barber_id, date)


@router.get("/shop/{shop_id}/{date}", response_model=List[BarberSlots])
def shop_slots(
    shop_id: int,
    date: date,
    barber_id: Optional[int] = None,
    status: Optional[SlotStatus] = SlotStatus.available,
    session: Session = Depends(get_session),
):
    get_active_shop(session, shop_id)

    stmt = select(Slot).where(Slot.shop_id == shop_id).where(Slot.date == date)
    if barber_id is not None:
        stmt = stmt.where(Slot.barber_id == barber_id)
    if status is not None:
        stmt = stmt.where(Slot.status == status.value)
    slots = session.exec(stmt.order_by(Slot.start_time)).all()

    # group by barber, barbers sorted by name
    grouped = {}
    for slot in slots:
        grouped.setdefault(slot.barber_id, []).append(slot)

    if not grouped:
        return []

    barbers = session.exec(
        select(User).where(User.id.in_(list(grouped))).order_by(User.name)
    ).all()
    return [{"barber": barber_public(barber), "slots": grouped[barber.id]} for barber in barbers]


@router.put("/{slot_id}/block", response_model=SlotPublic)
def block_slot(
    slot_id: int,
    body: SlotBlock,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "barber", "shop_owner", "admin")

    slot = session.get(Slot, slot_id)
    if slot is None:
        raise HTTPException(status_code=404, detail="Slot not found")

    if current_user["role"] == "barber" and slot.barber_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to modify this slot")
    if current_user["role"] == "shop_owner":
        shop = session.get(Shop, slot.shop_id)
        if shop is None or shop.owner_id != current_user["id"]:
            raise HTTPException(status_code=403, detail="Not authorized to modify this slot")

    if slot.is_booked:
        raise HTTPException(status_code=400, detail="Cannot block or unblock a booked slot")

    slot.status = "blocked" if body.block else "available"
    session.add(slot)
    session.commit()
    session.refresh(slot)
    logger.info("Slot %s %s by user %s (%s)", slot.id, slot.status, current_user["id"], body.reason or "no reason")
    return slot
