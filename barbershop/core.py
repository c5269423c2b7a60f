# barbershop/core.py

import math
from datetime import datetime, date, time


# legal next states per current booking status
BOOKING_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"in-progress", "completed", "cancelled", "no-show"},
    "in-progress": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
    "no-show": set(),
}

ACTIVE_BOOKING_STATUSES = ("pending", "confirmed", "in-progress")
TERMINAL_BOOKING_STATUSES = ("completed", "cancelled", "no-show")


def can_transition(current: str, new: str) -> bool:
    return new in BOOKING_TRANSITIONS.get(current, set())


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """Half-open interval intersection: [a_start, a_end) vs [b_start, b_end)."""
    return a_start < b_end and b_start < a_end


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def slot_start(day: date, start_time: str) -> datetime:
    return datetime.combine(day, time.fromisoformat(start_time.zfill(5)))


def paginate(total: int, page: int, limit: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit) if limit else 0,
    }
