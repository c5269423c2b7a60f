# barbershop/models.py

from typing import Optional, List
from datetime import datetime, date as Date

from sqlalchemy import DateTime, UniqueConstraint
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    phone: str = Field(index=True, unique=True)
    password_hash: str
    role: str = Field(default="customer", index=True)  # customer, barber, shop_owner, admin
    is_active: bool = True

    is_email_verified: bool = False
    email_verification_token: Optional[str] = Field(default=None, index=True)
    email_verification_expire: Optional[datetime] = Field(default=None, sa_type=DateTime)
    reset_password_token: Optional[str] = Field(default=None, index=True)
    reset_password_expire: Optional[datetime] = Field(default=None, sa_type=DateTime)

    # barber fields
    shop_id: Optional[int] = Field(default=None, index=True)
    specialties: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    experience: Optional[int] = None

    last_login: Optional[datetime] = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)


class Shop(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="user.id", index=True)

    name: str
    description: Optional[str] = None

    street: str
    city: str = Field(index=True)
    state: str
    zip_code: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    phone: str
    email: str
    website: Optional[str] = None

    # {"monday": {"open": "09:00", "close": "18:00", "closed": false}, ...}
    working_hours: dict = Field(default_factory=dict, sa_column=Column(JSON))
    features: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    rating_average: float = 0.0
    rating_count: int = 0

    allow_online_booking: bool = True
    max_advance_booking_days: int = 7
    slot_duration: int = 30
    buffer_time: int = 5

    verification_status: str = "pending"
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)


class ShopBarber(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("shop_id", "user_id", name="uq_shop_barber"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    shop_id: int = Field(foreign_key="shop.id", index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    is_active: bool = True
    specialties: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    experience: Optional[int] = None


class FavoriteShop(SQLModel, table=True):
    user_id: int = Field(foreign_key="user.id", primary_key=True)
    shop_id: int = Field(foreign_key="shop.id", primary_key=True)
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    shop_id: int = Field(foreign_key="shop.id", index=True)
    name: str
    description: Optional[str] = None
    category: str = Field(index=True)
    price: float
    duration: int  # minutes
    is_active: bool = True
    popularity: int = 0
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)


class WorkingHours(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("barber_id", "day_of_week", name="uq_barber_day"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="user.id", index=True)
    shop_id: int = Field(foreign_key="shop.id")
    day_of_week: int  # 0=Mon ... 6=Sun
    start_time: str
    end_time: str
    break_start_time: Optional[str] = None
    break_end_time: Optional[str] = None
    is_available: bool = True
    slot_duration: int = 30


class Slot(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("barber_id", "date", "start_time", name="uq_barber_date_start"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="user.id", index=True)
    shop_id: int = Field(foreign_key="shop.id", index=True)
    date: Date = Field(index=True)
    start_time: str
    end_time: str
    is_booked: bool = False
    booked_by: Optional[int] = Field(default=None, foreign_key="user.id")
    booking_id: Optional[int] = None
    status: str = Field(default="available", index=True)  # available, booked, blocked
    estimated_duration: int = 30
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)


class Booking(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    customer_id: int = Field(foreign_key="user.id", index=True)
    barber_id: int = Field(foreign_key="user.id", index=True)
    shop_id: int = Field(foreign_key="shop.id", index=True)
    slot_id: int = Field(foreign_key="slot.id", index=True)

    total_amount: float
    status: str = Field(default="pending", index=True)
    payment_status: str = "pending"
    payment_method: str = "cash"

    notes: Optional[str] = None
    customer_notes: Optional[str] = None
    cancel_reason: Optional[str] = None
    cancelled_by: Optional[int] = None
    cancelled_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    confirmed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    rating: Optional[int] = None
    review: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)


class BookingService(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    booking_id: int = Field(foreign_key="booking.id", index=True)
    service_id: int = Field(foreign_key="service.id")
    price: float  # price at booking time


class Specialty(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True)
    description: Optional[str] = None
    icon: str = "✂️"
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
