"""Availability model — one ledger entry per property per calendar day."""

import datetime as dt
import uuid

from sqlalchemy import Boolean, Date, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from staybook.database import Base, TimestampMixin, UUIDPrimaryKeyMixin
from staybook.models.enums import AvailabilitySource


class Availability(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Whether ``date`` is open for ``property_id``.

    Closed days record their cause: ``BOOKING`` days belong to ``booking_id``
    and are reopened when that booking is released; ``MANUAL`` days are host
    blackouts and only the host reopens them.
    """

    __tablename__ = "availability"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    source: Mapped[AvailabilitySource | None] = mapped_column(
        Enum(AvailabilitySource, native_enum=False, length=16),
        nullable=True,
    )
    booking_id: Mapped[uuid.UUID | None] = mapped_column(nullable=True, index=True)
    note: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (UniqueConstraint("property_id", "date", name="uq_availability_property_date"),)

    def __repr__(self) -> str:
        return f"<Availability(property_id={self.property_id}, date={self.date}, available={self.available})>"
