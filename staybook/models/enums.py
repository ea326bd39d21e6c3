"""Closed enumerations shared by models, schemas, and the booking engines."""

from enum import Enum


class BookingStatus(str, Enum):
    REQUESTED = "REQUESTED"
    AWAITING_PAYMENT = "AWAITING_PAYMENT"
    APPROVED = "APPROVED"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


TERMINAL_STATUSES = frozenset(
    {
        BookingStatus.COMPLETED,
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
        BookingStatus.EXPIRED,
    }
)

# Statuses that make a booking a conflict for new admissions.
ACTIVE_CONFLICT_STATUSES = frozenset(
    {
        BookingStatus.AWAITING_PAYMENT,
        BookingStatus.REQUESTED,
        BookingStatus.CONFIRMED,
        BookingStatus.CHECKED_IN,
    }
)


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


class CancellationPolicy(str, Enum):
    FLEXIBLE = "FLEXIBLE"
    MODERATE = "MODERATE"
    STRICT = "STRICT"
    SUPER_STRICT = "SUPER_STRICT"


class Actor(str, Enum):
    """Who performed a cancellation-type transition."""

    GUEST = "GUEST"
    HOST = "HOST"
    SYSTEM = "SYSTEM"


class PropertyStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING_REVIEW = "PENDING_REVIEW"


class AvailabilitySource(str, Enum):
    """Why a ledger day is closed."""

    BOOKING = "BOOKING"
    MANUAL = "MANUAL"
