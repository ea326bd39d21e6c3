"""Availability calendar and host blackout routes."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_caller, get_db, require_host
from staybook.auth.identity import CallerIdentity
from staybook.schemas.availability import BlackoutRequest, CalendarDayResponse, CalendarResponse
from staybook.services import availability
from staybook.services.availability import CalendarDay

router = APIRouter(prefix="/api/v1/properties", tags=["availability"])


def _calendar(property_id: uuid.UUID, start: date, end: date, days: list[CalendarDay]) -> CalendarResponse:
    return CalendarResponse(
        property_id=property_id,
        start=start,
        end=end,
        days=[CalendarDayResponse.model_validate(day) for day in days],
    )


@router.get(
    "/{property_id}/availability",
    response_model=CalendarResponse,
    summary="Get the availability calendar",
)
async def get_calendar(
    property_id: uuid.UUID,
    start: date = Query(..., description="First day"),
    end: date = Query(..., description="Day after the last day"),
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> CalendarResponse:
    days = await availability.get_calendar(db, property_id, start, end)
    return _calendar(property_id, start, end, days)


@router.post(
    "/{property_id}/blackouts",
    response_model=CalendarResponse,
    summary="Black out dates",
    responses={409: {"description": "Some dates are held by a booking"}},
)
async def create_blackout(
    property_id: uuid.UUID,
    body: BlackoutRequest,
    db: AsyncSession = Depends(get_db),
    host: CallerIdentity = Depends(require_host),
) -> CalendarResponse:
    """Close ``[start, end)`` for bookings. Days already held by a booking cannot be blacked out."""
    days = await availability.set_blackout(db, host, property_id, body.start, body.end, body.note)
    return _calendar(property_id, body.start, body.end, days)


@router.delete(
    "/{property_id}/blackouts",
    response_model=CalendarResponse,
    summary="Reopen blacked-out dates",
)
async def delete_blackout(
    property_id: uuid.UUID,
    start: date = Query(...),
    end: date = Query(...),
    db: AsyncSession = Depends(get_db),
    host: CallerIdentity = Depends(require_host),
) -> CalendarResponse:
    days = await availability.clear_blackout(db, host, property_id, start, end)
    return _calendar(property_id, start, end, days)
