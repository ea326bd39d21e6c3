"""initial_booking_schema

Revision ID: 5c1e8f2a9b3d
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e8f2a9b3d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "properties",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("host_id", sa.UUID(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("max_guests", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("nightly_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("cleaning_fee", sa.Numeric(10, 2), nullable=False),
        sa.Column("instant_book", sa.Boolean(), nullable=False),
        sa.Column("request_to_book", sa.Boolean(), nullable=False),
        sa.Column("approval_window_hours", sa.Integer(), nullable=False),
        sa.Column("cancellation_policy", sa.String(32), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_properties_host_id", "properties", ["host_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "property_id",
            sa.UUID(),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("guest_id", sa.UUID(), nullable=False),
        sa.Column("host_id", sa.UUID(), nullable=False),
        # Stay
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("number_of_nights", sa.Integer(), nullable=False),
        sa.Column("guests", sa.Integer(), nullable=False),
        sa.Column("adults", sa.Integer(), nullable=False),
        sa.Column("children", sa.Integer(), nullable=False),
        sa.Column("infants", sa.Integer(), nullable=False),
        sa.Column("special_requests", sa.Text(), nullable=True),
        # Money
        sa.Column("nightly_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("cleaning_fee", sa.Numeric(10, 2), nullable=False),
        sa.Column("service_fee", sa.Numeric(10, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("platform_commission", sa.Numeric(10, 2), nullable=False),
        sa.Column("host_earnings", sa.Numeric(10, 2), nullable=False),
        # Status and payment
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("payment_status", sa.String(32), nullable=False),
        sa.Column("payment_reference", sa.String(255), nullable=True),
        sa.Column("payment_captured_at", sa.DateTime(), nullable=True),
        sa.Column("hold_expires_at", sa.DateTime(), nullable=True),
        # Cancellation policy snapshot
        sa.Column("cancellation_policy", sa.String(32), nullable=False),
        sa.Column("cancellation_deadline", sa.Date(), nullable=True),
        # Audit
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(), nullable=True),
        sa.Column("checked_in_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("cancelled_by", sa.String(16), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("refund_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_bookings_property_id", "bookings", ["property_id"])
    op.create_index("ix_bookings_guest_id", "bookings", ["guest_id"])
    op.create_index("ix_bookings_host_id", "bookings", ["host_id"])
    op.create_index("ix_bookings_property_status", "bookings", ["property_id", "status"])
    op.create_index("ix_bookings_property_dates", "bookings", ["property_id", "check_in", "check_out"])

    op.create_table(
        "availability",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "property_id",
            sa.UUID(),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("available", sa.Boolean(), nullable=False),
        sa.Column("source", sa.String(16), nullable=True),
        sa.Column("booking_id", sa.UUID(), nullable=True),
        sa.Column("note", sa.String(255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("property_id", "date", name="uq_availability_property_date"),
    )
    op.create_index("ix_availability_property_id", "availability", ["property_id"])
    op.create_index("ix_availability_booking_id", "availability", ["booking_id"])


def downgrade() -> None:
    op.drop_index("ix_availability_booking_id", table_name="availability")
    op.drop_index("ix_availability_property_id", table_name="availability")
    op.drop_table("availability")

    op.drop_index("ix_bookings_property_dates", table_name="bookings")
    op.drop_index("ix_bookings_property_status", table_name="bookings")
    op.drop_index("ix_bookings_host_id", table_name="bookings")
    op.drop_index("ix_bookings_guest_id", table_name="bookings")
    op.drop_index("ix_bookings_property_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("ix_properties_host_id", table_name="properties")
    op.drop_table("properties")
