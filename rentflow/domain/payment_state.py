"""Payment state machine."""

from enum import Enum

from rentflow.core.exceptions import ValidationError


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CASH = "cash"
    ONLINE = "online"


PAYMENT_TRANSITIONS = {
    "pending": {"partial", "paid", "refunded"},
    "partial": {"paid", "refunded"},
    "paid": {"refunded"},
    "refunded": set(),
}


def assert_payment_transition(current: str, target: str) -> None:
    allowed = PAYMENT_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise ValidationError(
            f"Invalid payment transition: {current} → {target}"
        )
