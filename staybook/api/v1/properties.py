"""Properties API routes — listing management and price quotes."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_caller, get_db, require_host
from staybook.auth.identity import CallerIdentity
from staybook.booking.cancellation import cancellation_deadline
from staybook.booking.pricing import calculate_price, count_nights
from staybook.config import settings
from staybook.database import utcnow
from staybook.models.property import Property
from staybook.schemas.property import (
    PropertyCreate,
    PropertyResponse,
    PropertyUpdate,
    QuoteResponse,
)
from staybook.services.admission import validate_stay
from staybook.services.availability import seed_horizon

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


async def _get_property_or_404(db: AsyncSession, property_id: uuid.UUID) -> Property:
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()
    if prop is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    return prop


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="List a new property",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    host: CallerIdentity = Depends(require_host),
) -> PropertyResponse:
    """Create a property owned by the calling host and open its bookable horizon."""
    prop = Property(host_id=host.id, **body.model_dump())
    db.add(prop)
    await db.flush()
    await seed_horizon(db, prop.id, utcnow().date(), settings.availability_horizon_days)
    await db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a property by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> PropertyResponse:
    prop = await _get_property_or_404(db, property_id)
    return PropertyResponse.model_validate(prop)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    host: CallerIdentity = Depends(require_host),
) -> PropertyResponse:
    """Partially update a property. Existing bookings keep the price they were admitted at."""
    prop = await _get_property_or_404(db, property_id)
    if prop.host_id != host.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(prop, field, value)

    db.add(prop)
    await db.flush()
    await db.refresh(prop)

    return PropertyResponse.model_validate(prop)


@router.get(
    "/{property_id}/quote",
    response_model=QuoteResponse,
    summary="Quote the price of a stay",
)
async def quote(
    property_id: uuid.UUID,
    check_in: date = Query(..., description="Check-in date"),
    check_out: date = Query(..., description="Check-out date (exclusive)"),
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> QuoteResponse:
    """Price breakdown at the property's current rates. Nothing is reserved."""
    validate_stay(check_in, check_out, utcnow().date())
    prop = await _get_property_or_404(db, property_id)

    nights = count_nights(check_in, check_out)
    price = calculate_price(prop.nightly_rate, nights, prop.cleaning_fee)
    return QuoteResponse(
        property_id=prop.id,
        check_in=check_in,
        check_out=check_out,
        nights=nights,
        nightly_rate=price.nightly_rate,
        subtotal=price.subtotal,
        cleaning_fee=price.cleaning_fee,
        service_fee=price.service_fee,
        tax_amount=price.tax_amount,
        total_price=price.total_price,
        cancellation_policy=prop.cancellation_policy,
        cancellation_deadline=cancellation_deadline(prop.cancellation_policy, check_in),
    )
