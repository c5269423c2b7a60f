# barbershop/deps.py

import logging
from typing import Optional

from fastapi import HTTPException
from sqlmodel import Session, select

from barbershop.models import Shop, ShopBarber, User

logger = logging.getLogger(__name__)


def require_role(user: dict, *roles: str):
    if user["role"] not in roles:
        logger.warning("Role %s denied, needs one of %s", user["role"], roles)
        raise HTTPException(
            status_code=403,
            detail=f"User role {user['role']} is not authorized to access this route",
        )


def is_shop_manager(user: dict, shop: Shop) -> bool:
    return user["role"] == "admin" or shop.owner_id == user["id"]


def get_active_shop(session: Session, shop_id: int) -> Shop:
    shop = session.get(Shop, shop_id)
    if shop is None or not shop.is_active:
        raise HTTPException(status_code=404, detail="Shop not found")
    return shop


def get_managed_shop(session: Session, shop_id: int, user: dict, action: str = "manage") -> Shop:
    shop = session.get(Shop, shop_id)
    if shop is None:
        raise HTTPException(status_code=404, detail="Shop not found")
    if not is_shop_manager(user, shop):
        raise HTTPException(status_code=403, detail=f"Not authorized to {action} this shop")
    return shop


def find_owned_shop(session: Session, owner_id: int):
    return session.exec(
        select(Shop)
        .where(Shop.owner_id == owner_id)
        .where(Shop.is_active == True)  # noqa: E712
    ).first()


def is_active_barber(session: Session, shop_id: int, barber_id: int) -> bool:
    """True while the barber's account and their link to the shop are both active."""
    link = session.exec(
        select(ShopBarber)
        .join(User, User.id == ShopBarber.user_id)
        .where(ShopBarber.shop_id == shop_id)
        .where(ShopBarber.user_id == barber_id)
        .where(ShopBarber.is_active == True)  # noqa: E712
        .where(User.is_active == True)  # noqa: E712
    ).first()
    return link is not None


def barber_public(user: User, link: Optional[ShopBarber] = None) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "specialties": (link.specialties if link and link.specialties else user.specialties) or [],
        "experience": link.experience if link and link.experience is not None else user.experience,
        "is_active": user.is_active and (link.is_active if link else True),
    }
