"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staybook.models.enums import CancellationPolicy, PropertyStatus

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for listing a new property."""

    title: str = Field(..., min_length=1, max_length=255)
    max_guests: int = Field(..., ge=1)
    nightly_rate: Decimal = Field(..., ge=0, decimal_places=2)
    cleaning_fee: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    instant_book: bool = False
    request_to_book: bool = False
    approval_window_hours: int = Field(24, ge=1, le=168)
    cancellation_policy: CancellationPolicy = CancellationPolicy.FLEXIBLE
    status: PropertyStatus = PropertyStatus.ACTIVE


class PropertyUpdate(BaseModel):
    """Schema for partially updating a property. All fields optional.

    Rate changes only affect bookings admitted afterwards.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    max_guests: int | None = Field(None, ge=1)
    nightly_rate: Decimal | None = Field(None, ge=0, decimal_places=2)
    cleaning_fee: Decimal | None = Field(None, ge=0, decimal_places=2)
    instant_book: bool | None = None
    request_to_book: bool | None = None
    approval_window_hours: int | None = Field(None, ge=1, le=168)
    cancellation_policy: CancellationPolicy | None = None
    status: PropertyStatus | None = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "PropertyUpdate":
        """Every property column is required, so a field that is sent must carry a value."""
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Catalog record of a property."""

    id: uuid.UUID
    host_id: uuid.UUID
    title: str
    max_guests: int
    status: PropertyStatus
    nightly_rate: Decimal
    cleaning_fee: Decimal
    instant_book: bool
    request_to_book: bool
    approval_window_hours: int
    cancellation_policy: CancellationPolicy
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class QuoteResponse(BaseModel):
    """Price breakdown for a prospective stay."""

    property_id: uuid.UUID
    check_in: date
    check_out: date
    nights: int
    nightly_rate: Decimal
    subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    tax_amount: Decimal
    total_price: Decimal
    cancellation_policy: CancellationPolicy
    cancellation_deadline: date
