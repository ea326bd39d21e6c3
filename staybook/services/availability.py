"""Availability ledger — per-property, per-day open/closed flags.

Booking-derived closures are tagged with the booking that made them so that
releasing a booking never reopens a day the host blacked out separately.
"""

import logging
import uuid
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.auth.identity import CallerIdentity
from staybook.errors import ConflictError, NotPermittedError, ValidationError
from staybook.models.availability import Availability
from staybook.models.booking import Booking
from staybook.models.enums import AvailabilitySource
from staybook.models.property import Property
from staybook.services.locks import property_unit_of_work

logger = logging.getLogger(__name__)

MAX_CALENDAR_DAYS = 366


@dataclass(frozen=True)
class CalendarDay:
    date: date
    available: bool
    source: AvailabilitySource | None = None
    note: str | None = None


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day in the half-open range ``[start, end)``."""
    day = start
    while day < end:
        yield day
        day += timedelta(days=1)


def _validate_range(start: date, end: date) -> None:
    if end <= start:
        raise ValidationError("End date must be after start date")
    if (end - start).days > MAX_CALENDAR_DAYS:
        raise ValidationError(f"Date range cannot exceed {MAX_CALENDAR_DAYS} days")


async def _entries_in_range(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: date,
    end: date,
) -> dict[date, Availability]:
    result = await db.execute(
        select(Availability)
        .where(
            Availability.property_id == property_id,
            Availability.date >= start,
            Availability.date < end,
        )
        .execution_options(populate_existing=True)
    )
    return {entry.date: entry for entry in result.scalars().all()}


# ---------------------------------------------------------------------------
# Booking-driven changes (called inside a property unit of work)
# ---------------------------------------------------------------------------


async def block_for_booking(db: AsyncSession, booking: Booking) -> None:
    """Close every day of the booking's ``[check_in, check_out)`` range."""
    existing = await _entries_in_range(db, booking.property_id, booking.check_in, booking.check_out)
    for day in iter_days(booking.check_in, booking.check_out):
        entry = existing.get(day)
        if entry is None:
            entry = Availability(property_id=booking.property_id, date=day)
            db.add(entry)
        entry.available = False
        entry.source = AvailabilitySource.BOOKING
        entry.booking_id = booking.id
        entry.note = None
    await db.flush()


async def release_for_booking(db: AsyncSession, booking_id: uuid.UUID) -> int:
    """Reopen the days closed by ``booking_id``, past days included.

    Host blackouts are left untouched. Returns the number of days reopened.
    """
    result = await db.execute(
        update(Availability)
        .where(
            Availability.booking_id == booking_id,
            Availability.source == AvailabilitySource.BOOKING,
        )
        .values(available=True, source=None, booking_id=None)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


async def find_unavailable_days(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: date,
    end: date,
) -> list[date]:
    """Days in ``[start, end)`` explicitly marked unavailable."""
    result = await db.execute(
        select(Availability.date)
        .where(
            Availability.property_id == property_id,
            Availability.date >= start,
            Availability.date < end,
            Availability.available.is_(False),
        )
        .order_by(Availability.date)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Horizon and host blackouts
# ---------------------------------------------------------------------------


async def seed_horizon(db: AsyncSession, property_id: uuid.UUID, start: date, days: int) -> int:
    """Create open entries for the bookable horizon. Existing days are kept as-is.

    Returns the number of entries created.
    """
    end = start + timedelta(days=days)
    existing = await _entries_in_range(db, property_id, start, end)
    created = 0
    for day in iter_days(start, end):
        if day not in existing:
            db.add(Availability(property_id=property_id, date=day, available=True))
            created += 1
    await db.flush()
    return created


def _ensure_host(caller: CallerIdentity, prop: Property) -> None:
    if prop.host_id != caller.id:
        raise NotPermittedError()


async def set_blackout(
    db: AsyncSession,
    caller: CallerIdentity,
    property_id: uuid.UUID,
    start: date,
    end: date,
    note: str | None = None,
) -> list[CalendarDay]:
    """Close ``[start, end)`` as a host blackout.

    Raises:
        ConflictError: If any day in the range is held by a booking.
    """
    _validate_range(start, end)

    async with property_unit_of_work(db, property_id) as prop:
        _ensure_host(caller, prop)

        existing = await _entries_in_range(db, property_id, start, end)
        booked = [d for d, e in existing.items() if not e.available and e.source == AvailabilitySource.BOOKING]
        if booked:
            logger.info("Blackout on property %s rejected: %d booked day(s)", property_id, len(booked))
            raise ConflictError("dates unavailable")

        for day in iter_days(start, end):
            entry = existing.get(day)
            if entry is None:
                entry = Availability(property_id=property_id, date=day)
                db.add(entry)
            entry.available = False
            entry.source = AvailabilitySource.MANUAL
            entry.booking_id = None
            entry.note = note
        await db.flush()

    logger.info("Host %s blacked out %s..%s on property %s", caller.id, start, end, property_id)
    return await get_calendar(db, property_id, start, end)


async def clear_blackout(
    db: AsyncSession,
    caller: CallerIdentity,
    property_id: uuid.UUID,
    start: date,
    end: date,
) -> list[CalendarDay]:
    """Reopen host blackouts in ``[start, end)``. Booking-held days stay closed."""
    _validate_range(start, end)

    async with property_unit_of_work(db, property_id) as prop:
        _ensure_host(caller, prop)
        result = await db.execute(
            update(Availability)
            .where(
                Availability.property_id == property_id,
                Availability.date >= start,
                Availability.date < end,
                Availability.source == AvailabilitySource.MANUAL,
            )
            .values(available=True, source=None, note=None)
            .execution_options(synchronize_session="fetch")
        )
        reopened = result.rowcount or 0

    logger.info("Host %s reopened %d blacked-out day(s) on property %s", caller.id, reopened, property_id)
    return await get_calendar(db, property_id, start, end)


async def get_calendar(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: date,
    end: date,
) -> list[CalendarDay]:
    """Per-day availability for ``[start, end)``. Days without an entry are open."""
    _validate_range(start, end)
    existing = await _entries_in_range(db, property_id, start, end)
    days = []
    for day in iter_days(start, end):
        entry = existing.get(day)
        if entry is None:
            days.append(CalendarDay(date=day, available=True))
        else:
            days.append(CalendarDay(date=day, available=entry.available, source=entry.source, note=entry.note))
    return days
