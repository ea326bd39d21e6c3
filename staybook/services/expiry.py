"""Hold expiry — lazy (during admission) and swept (external scheduler)."""

import logging
import uuid
from collections import defaultdict
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.booking.holds import is_hold_expired
from staybook.database import utcnow
from staybook.models.booking import Booking
from staybook.models.enums import Actor, BookingStatus, PaymentStatus
from staybook.services.availability import release_for_booking
from staybook.services.locks import property_unit_of_work

logger = logging.getLogger(__name__)

HOLD_EXPIRED_REASON = "Payment hold expired"

# Unpaid statuses the sweep is allowed to expire.
SWEEPABLE_STATUSES = (
    BookingStatus.REQUESTED,
    BookingStatus.APPROVED,
    BookingStatus.AWAITING_PAYMENT,
)


async def expire_booking(
    db: AsyncSession,
    booking: Booking,
    now: datetime,
    allowed: tuple[BookingStatus, ...] = (BookingStatus.AWAITING_PAYMENT,),
) -> bool:
    """Move one booking with a lapsed hold to ``EXPIRED`` and release its days.

    Must run inside the property's unit of work. A booking that is no longer
    in an ``allowed`` status, is paid, or whose hold has not lapsed is left
    alone, so running this twice is harmless. Returns True if it expired.
    """
    if booking.status not in allowed:
        return False
    if booking.payment_status == PaymentStatus.PAID:
        return False
    if not is_hold_expired(booking.hold_expires_at, now):
        return False

    booking.status = BookingStatus.EXPIRED
    booking.cancelled_at = now
    booking.cancelled_by = Actor.SYSTEM
    booking.cancellation_reason = HOLD_EXPIRED_REASON
    await db.flush()
    await release_for_booking(db, booking.id)
    return True


async def expire_stale_holds(db: AsyncSession, now: datetime | None = None) -> list[uuid.UUID]:
    """Expire every unpaid booking whose hold deadline has passed.

    Each property is processed in its own unit of work and the candidates are
    re-read under the property lock, so a booking paid in the meantime is
    skipped. Returns the ids of the bookings that were expired.
    """
    now = now or utcnow()
    stale_filter = (
        Booking.status.in_(SWEEPABLE_STATUSES),
        Booking.hold_expires_at.is_not(None),
        Booking.hold_expires_at <= now,
        Booking.payment_status != PaymentStatus.PAID,
        Booking.deleted_at.is_(None),
    )

    result = await db.execute(select(Booking.id, Booking.property_id).where(*stale_filter))
    by_property: dict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
    for booking_id, property_id in result.all():
        by_property[property_id].append(booking_id)

    if not by_property:
        logger.info("Hold sweep: no expired holds found")
        return []

    expired: list[uuid.UUID] = []
    for property_id, booking_ids in by_property.items():
        async with property_unit_of_work(db, property_id):
            locked = await db.execute(
                select(Booking)
                .where(Booking.id.in_(booking_ids), *stale_filter)
                .execution_options(populate_existing=True)
            )
            for booking in locked.scalars().all():
                if await expire_booking(db, booking, now, allowed=SWEEPABLE_STATUSES):
                    expired.append(booking.id)

    logger.info("Hold sweep: expired %d booking(s) across %d propert(ies)", len(expired), len(by_property))
    return expired
