"""Booking lifecycle — role-gated status transitions and their side effects."""

import logging
import uuid
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.auth.identity import CallerIdentity
from staybook.booking.cancellation import calculate_refund, days_until_check_in
from staybook.booking.holds import approval_hold_deadline
from staybook.booking.transitions import (
    DELETABLE_STATUSES,
    TRANSITIONS,
    Action,
    Gate,
    TransitionRule,
    resolve_transition,
)
from staybook.database import utcnow
from staybook.errors import InvalidTransitionError, NotFoundError, NotPermittedError
from staybook.models.booking import Booking
from staybook.models.enums import Actor, BookingStatus, PaymentStatus
from staybook.services.availability import release_for_booking
from staybook.services.locks import property_unit_of_work

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_participant(caller: CallerIdentity, booking: Booking) -> bool:
    return caller.id in (booking.guest_id, booking.host_id)


async def _load_booking(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id, Booking.deleted_at.is_(None))
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


def _check_gate(rule: TransitionRule, caller: CallerIdentity, booking: Booking) -> None:
    if rule.gate == Gate.SYSTEM:
        allowed = caller.is_system
    elif rule.gate == Gate.HOST:
        allowed = caller.id == booking.host_id
    else:
        allowed = _is_participant(caller, booking)

    if not allowed:
        logger.warning("Caller %s not permitted to %s booking %s", caller.id, rule.action.value, booking.id)
        raise NotPermittedError()


def _apply_effects(
    rule: TransitionRule,
    booking: Booking,
    caller: CallerIdentity,
    now: datetime,
    reason: str | None,
    payment_reference: str | None,
) -> None:
    action = rule.action

    if action == Action.APPROVE:
        booking.approved_at = now
        booking.hold_expires_at = approval_hold_deadline(now)

    elif action == Action.DECLINE:
        booking.cancelled_at = now
        booking.cancelled_by = Actor.HOST
        booking.cancellation_reason = reason or "Declined by host"

    elif action == Action.CANCEL:
        actor = Actor.GUEST if caller.id == booking.guest_id else Actor.HOST
        booking.cancelled_at = now
        booking.cancelled_by = actor
        booking.cancellation_reason = reason or f"Cancelled by {actor.value.lower()}"
        if booking.payment_status == PaymentStatus.PAID:
            refund = calculate_refund(
                booking.cancellation_policy,
                days_until_check_in(booking.check_in, now),
                booking.total_price,
                booking.payment_status,
            )
            booking.refund_amount = refund
            if refund > 0:
                booking.payment_status = PaymentStatus.REFUNDED

    elif action == Action.MARK_PAID:
        booking.payment_status = PaymentStatus.PAID
        booking.payment_reference = payment_reference
        booking.payment_captured_at = now
        booking.confirmed_at = now
        booking.hold_expires_at = None

    elif action == Action.CHECK_IN:
        booking.checked_in_at = now

    elif action == Action.COMPLETE:
        booking.completed_at = now

    booking.status = rule.target


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def apply_action(
    db: AsyncSession,
    caller: CallerIdentity,
    booking_id: uuid.UUID,
    action: Action | str,
    *,
    reason: str | None = None,
    payment_reference: str | None = None,
    now: datetime | None = None,
) -> Booking:
    """Run one lifecycle action on a booking.

    The booking is re-read under its property's lock; the gate and the
    transition table are checked before anything is written, and the status
    change commits together with any ledger release.

    Raises:
        NotFoundError: Unknown or deleted booking.
        NotPermittedError: The caller may not perform this action.
        InvalidTransitionError: The action is illegal from the current status.
    """
    now = now or utcnow()
    rule = TRANSITIONS[Action(action)]
    booking = await _load_booking(db, booking_id)

    async with property_unit_of_work(db, booking.property_id):
        booking = await _load_booking(db, booking_id)
        _check_gate(rule, caller, booking)

        previous = booking.status
        try:
            resolve_transition(rule.action, previous)
        except InvalidTransitionError:
            logger.warning("Rejected %s on booking %s in status %s", rule.action.value, booking.id, previous.value)
            raise

        _apply_effects(rule, booking, caller, now, reason, payment_reference)
        await db.flush()

        if rule.releases_dates:
            await release_for_booking(db, booking.id)

    logger.info(
        "Booking %s: %s -> %s (%s by %s)",
        booking.id,
        previous.value,
        booking.status.value,
        rule.action.value,
        caller.role.value,
    )
    return booking


async def approve(db: AsyncSession, caller: CallerIdentity, booking_id: uuid.UUID) -> Booking:
    return await apply_action(db, caller, booking_id, Action.APPROVE)


async def decline(
    db: AsyncSession, caller: CallerIdentity, booking_id: uuid.UUID, reason: str | None = None
) -> Booking:
    return await apply_action(db, caller, booking_id, Action.DECLINE, reason=reason)


async def cancel(
    db: AsyncSession,
    caller: CallerIdentity,
    booking_id: uuid.UUID,
    reason: str | None = None,
    now: datetime | None = None,
) -> Booking:
    return await apply_action(db, caller, booking_id, Action.CANCEL, reason=reason, now=now)


async def mark_paid(
    db: AsyncSession, caller: CallerIdentity, booking_id: uuid.UUID, payment_reference: str | None = None
) -> Booking:
    return await apply_action(db, caller, booking_id, Action.MARK_PAID, payment_reference=payment_reference)


async def check_in(db: AsyncSession, caller: CallerIdentity, booking_id: uuid.UUID) -> Booking:
    return await apply_action(db, caller, booking_id, Action.CHECK_IN)


async def complete(db: AsyncSession, caller: CallerIdentity, booking_id: uuid.UUID) -> Booking:
    return await apply_action(db, caller, booking_id, Action.COMPLETE)


async def delete_booking(
    db: AsyncSession,
    caller: CallerIdentity,
    booking_id: uuid.UUID,
    now: datetime | None = None,
) -> Booking:
    """Soft-delete a cancelled or rejected booking on behalf of its guest."""
    booking = await _load_booking(db, booking_id)

    if booking.guest_id != caller.id:
        raise NotPermittedError()
    if booking.status not in DELETABLE_STATUSES:
        raise InvalidTransitionError("delete", booking.status)

    booking.deleted_at = now or utcnow()
    await db.flush()
    logger.info("Booking %s soft-deleted by guest %s", booking.id, caller.id)
    return booking


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_booking(db: AsyncSession, caller: CallerIdentity, booking_id: uuid.UUID) -> Booking:
    """Fetch a booking visible to the caller.

    Non-participants get ``NotFoundError`` so that booking ids do not leak.
    """
    booking = await _load_booking(db, booking_id)
    if not (caller.is_system or _is_participant(caller, booking)):
        raise NotFoundError("Booking not found")
    return booking


async def list_bookings(
    db: AsyncSession,
    caller: CallerIdentity,
    as_host: bool = False,
    status: BookingStatus | None = None,
    property_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Booking], int]:
    """Bookings where the caller is the guest (or the host), newest first.

    Soft-deleted bookings are excluded. Returns ``(items, total)``.
    """
    owner_filter = Booking.host_id == caller.id if as_host else Booking.guest_id == caller.id
    filters = [owner_filter, Booking.deleted_at.is_(None)]
    if status is not None:
        filters.append(Booking.status == status)
    if property_id is not None:
        filters.append(Booking.property_id == property_id)

    total_result = await db.execute(select(func.count()).select_from(Booking).where(*filters))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Booking).where(*filters).order_by(Booking.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total
