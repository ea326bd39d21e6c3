"""Reservation admission — admit or reject a new booking request.

The whole decision runs in one property unit of work:

1. scan active bookings overlapping ``[check_in, check_out)``;
2. set aside ``AWAITING_PAYMENT`` bookings whose hold has lapsed;
3. expire them and release their days;
4. reject if any real conflict remains (expiry is still committed);
5. reject if the ledger has a closed day in the range;
6. price the stay and pick the booking flow;
7. persist the booking;
8. close its days in the ledger.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.auth.identity import CallerIdentity
from staybook.booking.cancellation import cancellation_deadline
from staybook.booking.holds import is_hold_expired, resolve_hold_policy
from staybook.booking.pricing import calculate_price, count_nights
from staybook.database import utcnow
from staybook.errors import ConflictError, NotPermittedError, ValidationError
from staybook.models.booking import Booking
from staybook.models.enums import ACTIVE_CONFLICT_STATUSES, BookingStatus, PaymentStatus
from staybook.models.property import Property
from staybook.services.availability import block_for_booking, find_unavailable_days
from staybook.services.expiry import expire_booking
from staybook.services.locks import property_unit_of_work

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuestCounts:
    adults: int = 1
    children: int = 0
    infants: int = 0

    @property
    def total(self) -> int:
        """Guests counted against the property's capacity. Infants are not counted."""
        return self.adults + self.children


def validate_stay(check_in: date, check_out: date, today: date) -> None:
    """Date checks that need no shared state."""
    if check_out <= check_in:
        raise ValidationError("Check-out date must be after check-in date")
    if check_in < today:
        raise ValidationError("Check-in date cannot be in the past")


def _validate_guests(guests: GuestCounts) -> None:
    if guests.adults < 1:
        raise ValidationError("At least one adult is required")
    if guests.children < 0 or guests.infants < 0:
        raise ValidationError("Guest counts cannot be negative")


def _validate_property(prop: Property, caller: CallerIdentity, guests: GuestCounts) -> None:
    if not prop.is_bookable:
        raise ValidationError("Property is not available for booking")
    if guests.total > prop.max_guests:
        raise ValidationError(f"Property can accommodate maximum {prop.max_guests} guests")
    if prop.host_id == caller.id:
        raise ValidationError("You cannot book your own property")


async def find_overlapping_bookings(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
) -> list[Booking]:
    """Active-status bookings whose range overlaps ``[check_in, check_out)``."""
    result = await db.execute(
        select(Booking)
        .where(
            Booking.property_id == property_id,
            Booking.status.in_(ACTIVE_CONFLICT_STATUSES),
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


def partition_lapsed_holds(bookings: list[Booking], now: datetime) -> tuple[list[Booking], list[Booking]]:
    """Split overlapping bookings into (lapsed holds, real conflicts)."""
    lapsed, conflicts = [], []
    for booking in bookings:
        if booking.status == BookingStatus.AWAITING_PAYMENT and is_hold_expired(booking.hold_expires_at, now):
            lapsed.append(booking)
        else:
            conflicts.append(booking)
    return lapsed, conflicts


async def create_booking(
    db: AsyncSession,
    caller: CallerIdentity,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
    guests: GuestCounts,
    special_requests: str | None = None,
    now: datetime | None = None,
) -> Booking:
    """Admit a reservation request or reject it.

    Raises:
        ValidationError: Bad dates, guest count, unbookable or own property.
        NotPermittedError: System callers cannot book.
        NotFoundError: Unknown property.
        ConflictError: The dates are taken or blacked out.
    """
    now = now or utcnow()
    if caller.is_system:
        raise NotPermittedError()
    validate_stay(check_in, check_out, now.date())
    _validate_guests(guests)

    async with property_unit_of_work(db, property_id) as prop:
        _validate_property(prop, caller, guests)

        overlapping = await find_overlapping_bookings(db, property_id, check_in, check_out)
        lapsed, conflicts = partition_lapsed_holds(overlapping, now)

        for stale in lapsed:
            await expire_booking(db, stale, now)
        if lapsed:
            logger.info("Expired %d lapsed hold(s) on property %s", len(lapsed), property_id)

        if conflicts or await find_unavailable_days(db, property_id, check_in, check_out):
            # Expiry corrections stand even though this request loses.
            await db.commit()
            logger.info(
                "Booking request on property %s for %s..%s rejected: dates unavailable",
                property_id,
                check_in,
                check_out,
            )
            raise ConflictError("dates unavailable")

        nights = count_nights(check_in, check_out)
        price = calculate_price(prop.nightly_rate, nights, prop.cleaning_fee)
        hold = resolve_hold_policy(prop.instant_book, prop.request_to_book, prop.approval_window_hours)

        booking = Booking(
            property_id=prop.id,
            guest_id=caller.id,
            host_id=prop.host_id,
            check_in=check_in,
            check_out=check_out,
            number_of_nights=nights,
            guests=guests.total,
            adults=guests.adults,
            children=guests.children,
            infants=guests.infants,
            special_requests=special_requests,
            nightly_rate=price.nightly_rate,
            subtotal=price.subtotal,
            cleaning_fee=price.cleaning_fee,
            service_fee=price.service_fee,
            tax_amount=price.tax_amount,
            total_price=price.total_price,
            platform_commission=price.platform_commission,
            host_earnings=price.host_earnings,
            status=hold.initial_status,
            payment_status=PaymentStatus.PENDING,
            hold_expires_at=hold.expires_at(now),
            cancellation_policy=prop.cancellation_policy,
            cancellation_deadline=cancellation_deadline(prop.cancellation_policy, check_in),
        )
        db.add(booking)
        await db.flush()

        await block_for_booking(db, booking)

    logger.info(
        "Booking %s admitted on property %s for %s..%s (%s)",
        booking.id,
        property_id,
        check_in,
        check_out,
        booking.status.value,
    )
    return booking
