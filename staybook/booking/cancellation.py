"""Cancellation policy tiers and refund calculation.

Refund table (days until check-in, rounded up):

============  ==============  ==============
Tier          Full refund if  50% refund if
============  ==============  ==============
FLEXIBLE      >= 1            never
MODERATE      >= 5            >= 1
STRICT        >= 14           >= 7
SUPER_STRICT  >= 30           >= 14
============  ==============  ==============

Anything below the lowest threshold refunds nothing, and a booking that was
never paid refunds nothing.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from staybook.booking.pricing import to_money
from staybook.models.enums import CancellationPolicy, PaymentStatus

PARTIAL_REFUND_RATE = Decimal("0.5")


@dataclass(frozen=True)
class RefundTier:
    """Day thresholds for one cancellation policy."""

    full_refund_days: int
    partial_refund_days: int | None  # None = no partial tier
    deadline_days: int  # offset for the informational cancellation deadline


POLICY_TIERS: dict[CancellationPolicy, RefundTier] = {
    CancellationPolicy.FLEXIBLE: RefundTier(full_refund_days=1, partial_refund_days=None, deadline_days=1),
    CancellationPolicy.MODERATE: RefundTier(full_refund_days=5, partial_refund_days=1, deadline_days=5),
    CancellationPolicy.STRICT: RefundTier(full_refund_days=14, partial_refund_days=7, deadline_days=14),
    CancellationPolicy.SUPER_STRICT: RefundTier(full_refund_days=30, partial_refund_days=14, deadline_days=30),
}


def get_tier(policy: CancellationPolicy | str | None) -> RefundTier:
    """Look up a policy tier. Missing policies default to FLEXIBLE."""
    if policy is None:
        return POLICY_TIERS[CancellationPolicy.FLEXIBLE]
    return POLICY_TIERS[CancellationPolicy(policy)]


def days_until_check_in(check_in: date, now: datetime) -> int:
    """Whole days from ``now`` (naive UTC) until the start of ``check_in``, rounded up."""
    start = datetime.combine(check_in, time.min)
    return math.ceil((start - now).total_seconds() / 86400)


def refund_rate(policy: CancellationPolicy | str | None, days_until: int) -> Decimal:
    """Fraction of the total refunded for a cancellation ``days_until`` days out."""
    tier = get_tier(policy)
    if days_until >= tier.full_refund_days:
        return Decimal("1")
    if tier.partial_refund_days is not None and days_until >= tier.partial_refund_days:
        return PARTIAL_REFUND_RATE
    return Decimal("0")


def calculate_refund(
    policy: CancellationPolicy | str | None,
    days_until: int,
    total_price: Decimal,
    payment_status: PaymentStatus,
) -> Decimal:
    """Refund owed when a booking is cancelled ``days_until`` days before check-in.

    Returns zero unless the booking was paid. The result never exceeds
    ``total_price``.
    """
    if payment_status != PaymentStatus.PAID:
        return Decimal("0.00")

    total = to_money(total_price)
    refund = to_money(total * refund_rate(policy, days_until))
    return min(refund, total)


def cancellation_deadline(policy: CancellationPolicy | str | None, check_in: date) -> date:
    """Last day a guest can cancel for a full refund. Display only."""
    return check_in - timedelta(days=get_tier(policy).deadline_days)
