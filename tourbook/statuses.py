"""Closed state sets for tour dates and bookings."""

from enum import Enum
from typing import Dict, FrozenSet


class TourDateStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class PaymentMethod(str, Enum):
    ONSITE = "ONSITE"
    CARD_STUB = "CARD_STUB"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


# CANCELLED and REFUNDED are terminal; CANCELLED is the only seat-releasing state
ALLOWED_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.CANCELLED}),
    PaymentStatus.PAID: frozenset({PaymentStatus.CANCELLED, PaymentStatus.REFUNDED}),
    PaymentStatus.CANCELLED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}


def can_transition(current: "PaymentStatus | str", requested: "PaymentStatus | str") -> bool:
    """Return True when *current* may move to *requested*."""
    return PaymentStatus(requested) in ALLOWED_TRANSITIONS[PaymentStatus(current)]


def holds_seats(status: "PaymentStatus | str") -> bool:
    """Every booking except a cancelled one occupies its seats."""
    return PaymentStatus(status) != PaymentStatus.CANCELLED
