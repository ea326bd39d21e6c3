"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staybook.models.enums import (
    Actor,
    BookingStatus,
    CancellationPolicy,
    PaymentStatus,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for requesting a new booking."""

    property_id: uuid.UUID
    check_in: date
    check_out: date
    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)
    special_requests: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class ReasonRequest(BaseModel):
    """Optional free-text reason for decline or cancel."""

    reason: str | None = Field(None, max_length=1000)


class MarkPaidRequest(BaseModel):
    """Payment confirmation with the processor's reference."""

    payment_reference: str | None = Field(None, max_length=255)


class PaymentWebhookEvent(BaseModel):
    """Payment processor callback reporting a captured payment."""

    booking_id: uuid.UUID
    payment_reference: str = Field(..., min_length=1, max_length=255)
    status: str = Field("succeeded", pattern="^(succeeded|failed)$")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Full booking record returned from every booking command."""

    id: uuid.UUID
    property_id: uuid.UUID
    guest_id: uuid.UUID
    host_id: uuid.UUID

    check_in: date
    check_out: date
    number_of_nights: int
    guests: int
    adults: int
    children: int
    infants: int
    special_requests: str | None = None

    nightly_rate: Decimal
    subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    tax_amount: Decimal
    total_price: Decimal
    platform_commission: Decimal
    host_earnings: Decimal

    status: BookingStatus
    payment_status: PaymentStatus
    payment_reference: str | None = None
    payment_captured_at: datetime | None = None
    hold_expires_at: datetime | None = None

    cancellation_policy: CancellationPolicy
    cancellation_deadline: date | None = None

    approved_at: datetime | None = None
    confirmed_at: datetime | None = None
    checked_in_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by: Actor | None = None
    cancellation_reason: str | None = None
    refund_amount: Decimal | None = None

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int


class HoldSweepResponse(BaseModel):
    """Result of a hold expiry sweep."""

    expired_count: int
    booking_ids: list[uuid.UUID]
