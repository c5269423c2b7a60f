# barbershop/routers/users_routes.py

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import User
from barbershop.schemas import Page, UserPublic, UserRole, UserStatusUpdate
from barbershop.auth import get_current_user
from barbershop.core import paginate
from barbershop.deps import require_role

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
)


@router.get("/profile", response_model=UserPublic)
def profile(
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return session.get(User, current_user["id"])


@router.get("", response_model=Page[UserPublic])
def list_users(
    role: Optional[UserRole] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "admin")

    stmt = select(User)
    count_stmt = select(func.count()).select_from(User)
    if role is not None:
        stmt = stmt.where(User.role == role.value)
        count_stmt = count_stmt.where(User.role == role.value)

    total = session.exec(count_stmt).one()
    users = session.exec(
        stmt.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit)
    ).all()

    return {
        "count": len(users),
        "total": total,
        "pagination": paginate(total, page, limit),
        "data": users,
    }


@router.put("/{user_id}/status", response_model=UserPublic)
def set_user_status(
    user_id: int,
    body: UserStatusUpdate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "admin")

    user = session.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id == current_user["id"] and not body.is_active:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    user.is_active = body.is_active
    user.updated_at = datetime.now()
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("User %s set active=%s by admin %s", user.id, user.is_active, current_user["id"])
    return user
