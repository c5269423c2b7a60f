# barbershop/routers/specialties_routes.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Specialty
from barbershop.schemas import Message, SpecialtyCreate, SpecialtyPublic
from barbershop.auth import get_current_user
from barbershop.deps import require_role

router = APIRouter(
    prefix="/api/specialties",
    tags=["specialties"],
)


@router.get("", response_model=List[SpecialtyPublic])
def list_specialties(session: Session = Depends(get_session)):
    return session.exec(
        select(Specialty)
        .where(Specialty.is_active == True)  # noqa: E712
        .order_by(Specialty.name)
    ).all()


@router.post("", status_code=201, response_model=SpecialtyPublic)
def create_specialty(
    body: SpecialtyCreate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "admin")

    existing = session.exec(select(Specialty).where(Specialty.name == body.name)).first()
    if existing is not None:
        raise HTTPException(status_code=400, detail="Specialty already exists")

    specialty = Specialty(**body.model_dump(exclude_none=True))
    session.add(specialty)
    session.commit()
    session.refresh(specialty)
    return specialty


@router.put("/{specialty_id}", response_model=SpecialtyPublic)
def update_specialty(
    specialty_id: int,
    body: SpecialtyCreate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "admin")

    specialty = session.get(Specialty, specialty_id)
    if specialty is None:
        raise HTTPException(status_code=404, detail="Specialty not found")

    for field, value in body.model_dump(exclude_none=True).items():
        setattr(specialty, field, value)
    session.add(specialty)
    session.commit()
    session.refresh(specialty)
    return specialty


@router.delete("/{specialty_id}", response_model=Message)
def delete_specialty(
    specialty_id: int,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_role(current_user, "admin")

    specialty = session.get(Specialty, specialty_id)
    if specialty is None:
        raise HTTPException(status_code=404, detail="Specialty not found")

    specialty.is_active = False
    session.add(specialty)
    session.commit()
    return {"message": "Specialty deleted successfully"}
