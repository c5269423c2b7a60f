# barbershop/schemas.py

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from enum import Enum
from datetime import datetime, date
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")

TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"
PHONE_PATTERN = r"^\+?[0-9]{7,15}$"


class UserRole(str, Enum):
    customer = "customer"
    barber = "barber"
    shop_owner = "shop_owner"
    admin = "admin"


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no-show"


class SlotStatus(str, Enum):
    available = "available"
    booked = "booked"
    blocked = "blocked"


class ServiceCategory(str, Enum):
    haircut = "haircut"
    beard = "beard"
    shave = "shave"
    styling = "styling"
    coloring = "coloring"
    facial = "facial"
    massage = "massage"
    other = "other"


class PaymentMethod(str, Enum):
    cash = "cash"
    card = "card"
    upi = "upi"
    online = "online"


class Pagination(BaseModel):
    page: int
    limit: int
    pages: int


class Page(BaseModel, Generic[T]):
    count: int
    total: int
    pagination: Pagination
    data: List[T]


# --- users / auth ---

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str
    role: UserRole
    is_active: bool
    is_email_verified: bool = False
    shop_id: Optional[int] = None
    specialties: List[str] = []
    experience: Optional[int] = None
    last_login: Optional[datetime] = None


class LoginResponse(Token):
    user: UserPublic


class UserCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    phone: str = Field(pattern=PHONE_PATTERN)
    password: str = Field(min_length=6, max_length=72)
    role: UserRole = UserRole.customer


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    specialties: Optional[List[str]] = None
    experience: Optional[int] = Field(default=None, ge=0, le=50)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6, max_length=72)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str = Field(min_length=6, max_length=72)


class UserStatusUpdate(BaseModel):
    is_active: bool


class ShopOwnerRegister(BaseModel):
    owner_name: str = Field(min_length=2)
    email: EmailStr
    phone: str = Field(pattern=PHONE_PATTERN)
    password: str = Field(min_length=6, max_length=72)
    shop_name: str = Field(min_length=2)
    street: str = Field(min_length=5)
    city: str = Field(min_length=2)
    state: str = Field(min_length=2)
    zip_code: str = Field(min_length=3, max_length=10)
    shop_phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    shop_email: Optional[EmailStr] = None


# --- shops ---

class DayHours(BaseModel):
    open: str = Field(pattern=TIME_PATTERN)
    close: str = Field(pattern=TIME_PATTERN)
    closed: bool = False


class ServiceCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    category: ServiceCategory
    price: float = Field(ge=0)
    duration: int = Field(ge=15, le=480)


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[ServiceCategory] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, ge=15, le=480)
    is_active: Optional[bool] = None

    @field_validator("name", "category", "price", "duration", "is_active")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("cannot be null")
        return value


class ServicePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    shop_id: int
    name: str
    description: Optional[str] = None
    category: str
    price: float
    duration: int
    is_active: bool
    popularity: int


class ShopCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    street: str
    city: str
    state: str
    zip_code: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: str = Field(pattern=PHONE_PATTERN)
    email: EmailStr
    website: Optional[str] = None
    working_hours: Optional[dict[str, DayHours]] = None
    features: List[str] = []
    allow_online_booking: bool = True
    max_advance_booking_days: int = Field(default=7, ge=1, le=30)
    slot_duration: int = Field(default=30, ge=15, le=60)
    buffer_time: int = Field(default=5, ge=0, le=30)
    services: List[ServiceCreate] = []


class ShopUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    working_hours: Optional[dict[str, DayHours]] = None
    features: Optional[List[str]] = None
    allow_online_booking: Optional[bool] = None
    max_advance_booking_days: Optional[int] = Field(default=None, ge=1, le=30)
    slot_duration: Optional[int] = Field(default=None, ge=15, le=60)
    buffer_time: Optional[int] = Field(default=None, ge=0, le=30)

    # description, website and coordinates may be cleared; the rest are required columns
    @field_validator(
        "name", "street", "city", "state", "zip_code", "phone", "email", "features",
        "allow_online_booking", "max_advance_booking_days", "slot_duration", "buffer_time",
    )
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("cannot be null")
        return value


class ShopPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    name: str
    description: Optional[str] = None
    street: str
    city: str
    state: str
    zip_code: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: str
    email: str
    website: Optional[str] = None
    working_hours: dict = {}
    features: List[str] = []
    rating_average: float
    rating_count: int
    allow_online_booking: bool
    max_advance_booking_days: int
    slot_duration: int
    buffer_time: int
    verification_status: str
    is_active: bool


class ShopRegistered(Token):
    user: UserPublic
    shop: ShopPublic


class BarberCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    phone: str = Field(pattern=PHONE_PATTERN)
    password: str = Field(min_length=6, max_length=72)
    specialties: List[str] = []
    experience: Optional[int] = Field(default=None, ge=0, le=50)


class BarberPublic(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    specialties: List[str] = []
    experience: Optional[int] = None
    is_active: bool


class QueueStatus(BaseModel):
    shop_id: int
    count: int
    estimated_wait_time: int
    last_updated: datetime


# --- specialties ---

class SpecialtyCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    icon: Optional[str] = None


class SpecialtyPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    icon: str
    is_active: bool


# --- working hours / slots ---

class WorkingHoursSet(BaseModel):
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    break_start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    break_end_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    is_available: bool = True
    slot_duration: int = Field(default=30, ge=15, le=120)
    shop_id: Optional[int] = None


class WorkingHoursPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    barber_id: int
    shop_id: int
    day_of_week: int
    start_time: str
    end_time: str
    break_start_time: Optional[str] = None
    break_end_time: Optional[str] = None
    is_available: bool
    slot_duration: int


class SlotGenerate(BaseModel):
    start_date: date
    end_date: date
    barber_id: Optional[int] = None
    shop_id: Optional[int] = None


class SlotGenerateResult(BaseModel):
    slots_generated: int
    start_date: date
    end_date: date


class SlotBlock(BaseModel):
    block: bool = True
    reason: Optional[str] = Field(default=None, max_length=200)


class SlotPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    barber_id: int
    shop_id: int
    date: date
    start_time: str
    end_time: str
    is_booked: bool
    status: SlotStatus
    estimated_duration: int


class BarberSlots(BaseModel):
    barber: BarberPublic
    slots: List[SlotPublic]


# --- bookings ---

class BookingCreate(BaseModel):
    slot_id: int
    service_ids: List[int] = Field(min_length=1)
    notes: Optional[str] = Field(default=None, max_length=500)
    customer_notes: Optional[str] = Field(default=None, max_length=300)
    payment_method: PaymentMethod = PaymentMethod.cash


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    notes: Optional[str] = Field(default=None, max_length=500)


class BookingCancel(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=200)


class BookingReview(BaseModel):
    rating: int = Field(ge=1, le=5)
    review: Optional[str] = Field(default=None, max_length=500)


class BookedService(BaseModel):
    service_id: int
    name: str
    price: float
    duration: int


class BookingPublic(BaseModel):
    id: int
    customer_id: int
    barber_id: int
    shop_id: int
    slot_id: int
    date: date
    start_time: str
    end_time: str
    services: List[BookedService]
    total_amount: float
    status: BookingStatus
    payment_status: str
    payment_method: str
    notes: Optional[str] = None
    customer_notes: Optional[str] = None
    cancel_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    rating: Optional[int] = None
    review: Optional[str] = None
    created_at: datetime


class Message(BaseModel):
    message: str
