"""Price calculation for a stay — fees, tax, commission, and host payout.

Every amount is a ``Decimal`` rounded to cents. The calculator is pure; the
admission service stores its result on the booking so that later rate changes
never touch an existing reservation.
"""

import math
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

SERVICE_FEE_RATE = Decimal("0.10")
TAX_RATE = Decimal("0.12")
PLATFORM_COMMISSION_RATE = Decimal("0.15")

_CENTS = Decimal("0.01")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Round a value to cents using half-up rounding."""
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceBreakdown:
    """Stored price components for a booking."""

    nights: int
    nightly_rate: Decimal
    subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    tax_amount: Decimal
    total_price: Decimal
    platform_commission: Decimal
    host_earnings: Decimal


def count_nights(check_in: date, check_out: date) -> int:
    """Number of nights in ``[check_in, check_out)``, rounding partial days up."""
    return math.ceil((check_out - check_in).total_seconds() / 86400)


def calculate_price(
    nightly_rate: Decimal | int | float | str,
    nights: int,
    cleaning_fee: Decimal | int | float | str = 0,
) -> PriceBreakdown:
    """Compute the full price breakdown for ``nights`` at ``nightly_rate``.

    The service fee and tax are rounded once each, and ``total_price`` is the
    sum of the rounded components, so the stored total always equals
    ``subtotal + cleaning_fee + service_fee + tax_amount``.
    """
    rate = to_money(nightly_rate)
    cleaning = to_money(cleaning_fee or 0)

    subtotal = to_money(rate * nights)
    raw_service_fee = subtotal * SERVICE_FEE_RATE
    service_fee = to_money(raw_service_fee)
    tax_amount = to_money((subtotal + raw_service_fee) * TAX_RATE)
    total_price = subtotal + cleaning + service_fee + tax_amount

    platform_commission = to_money(subtotal * PLATFORM_COMMISSION_RATE)
    host_earnings = subtotal - platform_commission

    return PriceBreakdown(
        nights=nights,
        nightly_rate=rate,
        subtotal=subtotal,
        cleaning_fee=cleaning,
        service_fee=service_fee,
        tax_amount=tax_amount,
        total_price=total_price,
        platform_commission=platform_commission,
        host_earnings=host_earnings,
    )
