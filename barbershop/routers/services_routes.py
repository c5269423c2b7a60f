# barbershop/routers/services_routes.py

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Service, Shop
from barbershop.schemas import (
    Message,
    ServiceCategory,
    ServiceCreate,
    ServicePublic,
    ServiceUpdate,
)
from barbershop.auth import get_current_user
from barbershop.deps import find_owned_shop, get_active_shop, is_shop_manager, require_role

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/services",
    tags=["services"],
)


def _managed_service(session: Session, service_id: int, user: dict, action: str) -> Service:
    service = session.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")

    shop = session.get(Shop, service.shop_id)
    if shop is None or not is_shop_manager(user, shop):
        raise HTTPException(status_code=403, detail=f"Not authorized to {action} this service")
    return service


@router.get("", response_model=List[ServicePublic])
def list_services(
    shop_id: Optional[int] = None,
    category: Optional[ServiceCategory] = None,
    session: Session = Depends(get_session),
):
    stmt = select(Service).where(Service.is_active == True)  # noqa: E712
    if shop_id is not None:
        stmt = stmt.where(Service.shop_id == shop_id)
    if category is not None:
        stmt = stmt.where(Service.category == category.value)
    return session.exec(stmt.order_by(Service.popularity.desc(), Service.name)).all()


@router.get("/shop/{shop_id}", response_model=List[ServicePublic])
def services_for_shop(shop_id: int, session: Session = Depends(get_session)):
    get_active_shop(session, shop_id)
    return session.exec(
        select(Service)
        .where(Service.shop_id == shop_id)
        .where(Service.is_active == True)  # noqa: E712
        .order_by(Service.category, Service.name)
    ).all()


@router.get("/{service_id}", response_model=ServicePublic)
def get_service(service_id: int, session: Session = Depends(get_session)):
    service = session.get(Service, service_id)
    if service is None or not service.is_active:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.post("", status_code=201, response_model=ServicePublic)
def create_service(
    body: ServiceCreate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "barber", "shop_owner", "admin")

    # owners create in the shop they own, barbers in the shop they work at
    shop = find_owned_shop(session, current_user["id"])
    if shop is None and current_user["shop_id"] is not None:
        shop = session.get(Shop, current_user["shop_id"])
    if shop is None or not shop.is_active:
        raise HTTPException(status_code=400, detail="You must have a shop to create services")

    service = Service(shop_id=shop.id, **body.model_dump(mode="json"))
    session.add(service)
    session.commit()
    session.refresh(service)
    logger.info("Service %s created in shop %s", service.id, shop.id)
    return service


@router.put("/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: int,
    body: ServiceUpdate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = _managed_service(session, service_id, current_user, "update")

    for field, value in body.model_dump(mode="json", exclude_unset=True).items():
        setattr(service, field, value)
    service.updated_at = datetime.now()
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@router.delete("/{service_id}", response_model=Message)
def delete_service(
    service_id: int,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = _managed_service(session, service_id, current_user, "delete")

    service.is_active = False
    service.updated_at = datetime.now()
    session.add(service)
    session.commit()
    return {"message": "Service deleted successfully"}
