# barbershop/routers/auth_routes.py

import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import or_
from sqlmodel import Session, select

from barbershop.config import settings
from barbershop.data import DEFAULT_SHOP_HOURS
from barbershop.db import get_session
from barbershop.models import Shop, User
from barbershop.notifications import send_password_reset_email, send_verification_email
from barbershop.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    Message,
    PasswordChange,
    ProfileUpdate,
    ResetPasswordRequest,
    ShopOwnerRegister,
    ShopRegistered,
    Token,
    UserCreate,
    UserPublic,
)
from barbershop.auth import (
    create_access_token,
    generate_reset_token,
    get_current_user,
    hash_password,
    hash_token,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


def _ensure_unique(session: Session, email: str, phone: str):
    existing = session.exec(
        select(User).where(or_(User.email == email, User.phone == phone))
    ).first()
    if existing is not None:
        field = "email" if existing.email == email else "phone"
        raise HTTPException(status_code=400, detail=f"User with this {field} already exists")


def _authenticate(session: Session, email: str, password: str) -> User:
    user = session.exec(
        select(User).where(User.email == email.lower())
    ).first()

    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Your account has been deactivated")

    user.last_login = datetime.now()
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.post("/register", status_code=201, response_model=UserPublic)
def register(
    user: UserCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
):
    if user.role.value not in ("customer", "barber"):
        raise HTTPException(status_code=400, detail="Role must be either customer or barber")

    email = user.email.lower()
    _ensure_unique(session, email, user.phone)

    raw_token, hashed_token = generate_reset_token()
    db_user = User(
        name=user.name,
        email=email,
        phone=user.phone,
        password_hash=hash_password(user.password),
        role=user.role.value,
        email_verification_token=hashed_token,
        email_verification_expire=datetime.now() + timedelta(hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS),
    )
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    logger.info("Registered user %s as %s", db_user.id, db_user.role)

    background_tasks.add_task(send_verification_email, db_user.email, raw_token, db_user.name)
    return db_user


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    session: Session = Depends(get_session),
):
    user = _authenticate(session, credentials.email, credentials.password)
    token = create_access_token({"sub": str(user.id)})
    return {"access_token": token, "token_type": "bearer", "user": user}


@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    user = _authenticate(session, form_data.username, form_data.password)
    token = create_access_token({"sub": str(user.id)})
    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=UserPublic)
def me(
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return session.get(User, current_user["id"])


@router.put("/profile", response_model=UserPublic)
def update_profile(
    updates: ProfileUpdate,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    changes = updates.model_dump(exclude_unset=True, exclude_none=True)

    if "phone" in changes:
        taken = session.exec(
            select(User)
            .where(User.phone == changes["phone"])
            .where(User.id != current_user["id"])
        ).first()
        if taken is not None:
            raise HTTPException(status_code=400, detail="Phone number already in use")

    user = session.get(User, current_user["id"])
    for field, value in changes.items():
        setattr(user, field, value)
    user.updated_at = datetime.now()

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.put("/change-password", response_model=Message)
def change_password(
    body: PasswordChange,
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    user = session.get(User, current_user["id"])
    if not verify_password(body.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    user.password_hash = hash_password(body.new_password)
    user.updated_at = datetime.now()
    session.add(user)
    session.commit()
    return {"message": "Password changed successfully"}


@router.post("/forgot-password")
def forgot_password(
    body: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
):
    user = session.exec(
        select(User).where(User.email == body.email.lower())
    ).first()
    if user is None:
        raise HTTPException(status_code=404, detail="No user found with this email address")

    raw_token, hashed_token = generate_reset_token()
    user.reset_password_token = hashed_token
    user.reset_password_expire = datetime.now() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    session.add(user)
    session.commit()

    background_tasks.add_task(send_password_reset_email, user.email, raw_token, user.name)

    response = {"message": "Password reset instructions sent to your email"}
    if settings.ENV == "development":
        response["reset_token"] = raw_token
    return response


@router.put("/reset-password/{token}", response_model=Token)
def reset_password(
    token: str,
    body: ResetPasswordRequest,
    session: Session = Depends(get_session),
):
    user = session.exec(
        select(User)
        .where(User.reset_password_token == hash_token(token))
        .where(User.reset_password_expire > datetime.now())
    ).first()
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid or expired password reset token")

    user.password_hash = hash_password(body.password)
    user.reset_password_token = None
    user.reset_password_expire = None
    session.add(user)
    session.commit()

    return {"access_token": create_access_token({"sub": str(user.id)}), "token_type": "bearer"}


@router.get("/verify-email/{token}", response_model=Message)
def verify_email(
    token: str,
    session: Session = Depends(get_session),
):
    user = session.exec(
        select(User)
        .where(User.email_verification_token == hash_token(token))
        .where(User.email_verification_expire > datetime.now())
    ).first()
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")

    user.is_email_verified = True
    user.email_verification_token = None
    user.email_verification_expire = None
    session.add(user)
    session.commit()
    return {"message": "Email verified successfully"}


@router.post("/shop-register", status_code=201, response_model=ShopRegistered)
def shop_owner_register(
    body: ShopOwnerRegister,
    session: Session = Depends(get_session),
):
    email = body.email.lower()
    _ensure_unique(session, email, body.phone)

    # 1) Owner account
    owner = User(
        name=body.owner_name,
        email=email,
        phone=body.phone,
        password_hash=hash_password(body.password),
        role="shop_owner",
    )
    session.add(owner)
    session.flush()  # fills owner.id

    # 2) Initial shop profile
    shop = Shop(
        owner_id=owner.id,
        name=body.shop_name,
        street=body.street,
        city=body.city,
        state=body.state,
        zip_code=body.zip_code,
        phone=body.shop_phone or body.phone,
        email=body.shop_email or email,
        working_hours={day: dict(hours) for day, hours in DEFAULT_SHOP_HOURS.items()},
    )
    session.add(shop)
    session.flush()

    owner.shop_id = shop.id
    session.add(owner)
    session.commit()
    session.refresh(owner)
    session.refresh(shop)
    logger.info("Shop owner %s registered shop %s", owner.id, shop.id)

    token = create_access_token({"sub": str(owner.id)})
    return {"access_token": token, "token_type": "bearer", "user": owner, "shop": shop}


@router.post("/shop-login", response_model=LoginResponse)
def shop_owner_login(
    credentials: LoginRequest,
    session: Session = Depends(get_session),
):
    user = _authenticate(session, credentials.email, credentials.password)
    if user.role not in ("shop_owner", "admin"):
        raise HTTPException(status_code=403, detail="Access denied. Shop owner account required.")

    token = create_access_token({"sub": str(user.id)})
    return {"access_token": token, "token_type": "bearer", "user": user}
