"""Property model — the bookable listing and its pricing configuration."""

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, Enum, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from staybook.database import Base, TimestampMixin, UUIDPrimaryKeyMixin
from staybook.models.enums import CancellationPolicy, PropertyStatus


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A listing owned by a host.

    Rates and flags here are read at admission time only; bookings keep their
    own copy of every price component.
    """

    __tablename__ = "properties"

    host_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[PropertyStatus] = mapped_column(
        Enum(PropertyStatus, native_enum=False, length=32),
        default=PropertyStatus.ACTIVE,
        nullable=False,
    )
    nightly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    instant_book: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    request_to_book: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    approval_window_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=24)
    cancellation_policy: Mapped[CancellationPolicy] = mapped_column(
        Enum(CancellationPolicy, native_enum=False, length=32),
        default=CancellationPolicy.FLEXIBLE,
        nullable=False,
    )

    @property
    def is_bookable(self) -> bool:
        return self.status == PropertyStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, status={self.status})>"
