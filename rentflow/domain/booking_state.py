"""Booking state machine."""

from datetime import date
from enum import Enum

from rentflow.core.exceptions import ValidationError


class BookingStatus(str, Enum):
    """Booking lifecycle states. OVERDUE is derived on read, never stored."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PICKED_UP = "picked-up"
    RETURNED = "returned"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.PICKED_UP, BookingStatus.CANCELLED},
    BookingStatus.PICKED_UP: {BookingStatus.RETURNED, BookingStatus.CANCELLED},
    BookingStatus.RETURNED: set(),
    BookingStatus.CANCELLED: set(),
}

TERMINAL_STATUSES = frozenset({BookingStatus.RETURNED, BookingStatus.CANCELLED})
ACTIVE_STATUSES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.PICKED_UP}
)


def can_transition(current: str | BookingStatus, target: str | BookingStatus) -> bool:
    """Whether a stored booking may move from ``current`` to ``target``."""
    try:
        current = BookingStatus(current)
        target = BookingStatus(target)
    except ValueError:
        return False
    return target in BOOKING_TRANSITIONS.get(current, set())


def assert_booking_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise ValidationError(
            f"Invalid booking transition: {current} → {target}"
        )


def effective_status(status: str, end_date: date, today: date | None = None) -> str:
    """Status as shown to users: active bookings past their end date read as overdue."""
    today = today or date.today()
    if status in {s.value for s in ACTIVE_STATUSES} and end_date < today:
        return BookingStatus.OVERDUE.value
    return status
