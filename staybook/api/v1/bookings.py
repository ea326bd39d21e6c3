"""Bookings API router.

Visibility rule: a caller only sees bookings where they are the guest or the
host. Every command returns the updated booking; domain errors are turned into
HTTP responses by ``staybook.api.exceptions``.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_caller, get_db
from staybook.auth.identity import CallerIdentity
from staybook.models.booking import Booking
from staybook.models.enums import BookingStatus
from staybook.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    MarkPaidRequest,
    ReasonRequest,
)
from staybook.schemas.common import MessageResponse
from staybook.services import lifecycle
from staybook.services.admission import GuestCounts, create_booking

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a booking",
    responses={409: {"description": "Dates unavailable"}},
)
async def create(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> Booking:
    """Admit a booking request for the caller as guest.

    Instant-book properties start in ``AWAITING_PAYMENT``; all others start in
    ``REQUESTED`` and wait for the host.
    """
    return await create_booking(
        db,
        caller,
        property_id=body.property_id,
        check_in=body.check_in,
        check_out=body.check_out,
        guests=GuestCounts(adults=body.adults, children=body.children, infants=body.infants),
        special_requests=body.special_requests,
    )


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List the caller's bookings",
)
async def list_bookings(
    role: str = Query("guest", pattern="^(guest|host)$", description="List trips (guest) or reservations (host)"),
    status_filter: BookingStatus | None = Query(None, alias="status", description="Filter by booking status"),
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> dict:
    """Return a paginated list of bookings, newest first. Deleted bookings are hidden."""
    items, total = await lifecycle.list_bookings(
        db,
        caller,
        as_host=role == "host",
        status=status_filter,
        property_id=property_id,
        skip=skip,
        limit=limit,
    )
    return {"items": items, "total": total}


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> Booking:
    """Retrieve a booking. Returns 404 unless the caller is its guest or host."""
    return await lifecycle.get_booking(db, caller, booking_id)


@router.post("/{booking_id}/approve", response_model=BookingResponse, summary="Approve a booking request")
async def approve(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> Booking:
    """Host approves a ``REQUESTED`` booking; the guest gets 48 hours to pay."""
    return await lifecycle.approve(db, caller, booking_id)


@router.post("/{booking_id}/decline", response_model=BookingResponse, summary="Decline a booking request")
async def decline(
    booking_id: uuid.UUID,
    body: ReasonRequest | None = None,
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> Booking:
    """Host declines a booking and its dates are released."""
    return await lifecycle.decline(db, caller, booking_id, body.reason if body else None)


@router.post("/{booking_id}/cancel", response_model=BookingResponse, summary="Cancel a booking")
async def cancel(
    booking_id: uuid.UUID,
    body: ReasonRequest | None = None,
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> Booking:
    """Guest or host cancels; paid bookings are refunded per their policy snapshot."""
    return await lifecycle.cancel(db, caller, booking_id, body.reason if body else None)


@router.post("/{booking_id}/mark-paid", response_model=BookingResponse, summary="Record a captured payment")
async def mark_paid(
    booking_id: uuid.UUID,
    body: MarkPaidRequest | None = None,
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> Booking:
    """Confirm a booking after payment capture. Requires a system token."""
    return await lifecycle.mark_paid(db, caller, booking_id, body.payment_reference if body else None)


@router.post("/{booking_id}/check-in", response_model=BookingResponse, summary="Check a guest in")
async def check_in(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> Booking:
    return await lifecycle.check_in(db, caller, booking_id)


@router.post("/{booking_id}/complete", response_model=BookingResponse, summary="Complete a stay")
async def complete(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> Booking:
    return await lifecycle.complete(db, caller, booking_id)


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    summary="Delete a cancelled or rejected booking",
)
async def delete_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> MessageResponse:
    """Soft-delete a booking from the guest's history."""
    await lifecycle.delete_booking(db, caller, booking_id)
    return MessageResponse(message="Booking deleted")
