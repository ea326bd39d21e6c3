"""Hold expiry policy for instant-book and request-to-book flows."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from staybook.models.enums import BookingStatus

INSTANT_BOOK_HOLD_MINUTES = 15
DEFAULT_APPROVAL_WINDOW_HOURS = 24
POST_APPROVAL_PAYMENT_WINDOW = timedelta(hours=48)


@dataclass(frozen=True)
class HoldPolicy:
    """How a new booking starts and how long its dates are held."""

    is_instant_book: bool
    initial_status: BookingStatus
    hold_minutes: int

    def expires_at(self, now: datetime) -> datetime:
        return now + timedelta(minutes=self.hold_minutes)


def resolve_hold_policy(
    instant_book: bool,
    request_to_book: bool,
    approval_window_hours: int | None = None,
) -> HoldPolicy:
    """Pick the booking flow from a property's flags.

    Instant book applies only when request-to-book is off. Request-to-book
    properties hold the dates for their approval window; every other property
    holds them for the short instant-book window.
    """
    is_instant_book = bool(instant_book) and not request_to_book
    if request_to_book:
        hold_minutes = (approval_window_hours or DEFAULT_APPROVAL_WINDOW_HOURS) * 60
    else:
        hold_minutes = INSTANT_BOOK_HOLD_MINUTES

    return HoldPolicy(
        is_instant_book=is_instant_book,
        initial_status=BookingStatus.AWAITING_PAYMENT if is_instant_book else BookingStatus.REQUESTED,
        hold_minutes=hold_minutes,
    )


def approval_hold_deadline(now: datetime) -> datetime:
    """Payment deadline given to a guest once the host approves."""
    return now + POST_APPROVAL_PAYMENT_WINDOW


def is_hold_expired(hold_expires_at: datetime | None, now: datetime) -> bool:
    """A hold is expired at or after its deadline. Bookings without a hold never expire."""
    return hold_expires_at is not None and hold_expires_at <= now
