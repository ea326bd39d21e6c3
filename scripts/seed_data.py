"""Seed the database with demo listings and bookings.

Creates one demo host with three properties (one per booking mode), opens
their availability horizon, and admits a few bookings through the regular
admission path so the ledger and prices are consistent. Prints bearer tokens
for the demo host, the demo guest and the system actor.

Run from the repository root:
    python -m scripts.seed_data
"""

import asyncio
import sys
import uuid
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

# Add the repository root to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from staybook.auth.identity import SYSTEM_CALLER, CallerIdentity, Role
from staybook.auth.jwt import create_access_token
from staybook.config import settings
from staybook.database import async_session_factory, utcnow
from staybook.models.availability import Availability
from staybook.models.booking import Booking
from staybook.models.enums import CancellationPolicy
from staybook.models.property import Property
from staybook.services import lifecycle
from staybook.services.admission import GuestCounts, create_booking
from staybook.services.availability import seed_horizon, set_blackout

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_HOST_ID = uuid.UUID("00000000-0000-4000-8000-0000000000a1")
DEMO_GUEST_ID = uuid.UUID("00000000-0000-4000-8000-0000000000b1")

PROPERTIES = [
    {
        "title": "Harbour View Loft",
        "max_guests": 4,
        "nightly_rate": Decimal("100.00"),
        "cleaning_fee": Decimal("0.00"),
        "instant_book": True,
        "cancellation_policy": CancellationPolicy.FLEXIBLE,
    },
    {
        "title": "Hillside Cottage",
        "max_guests": 6,
        "nightly_rate": Decimal("185.00"),
        "cleaning_fee": Decimal("60.00"),
        "request_to_book": True,
        "approval_window_hours": 24,
        "cancellation_policy": CancellationPolicy.MODERATE,
    },
    {
        "title": "Lakeside Cabin",
        "max_guests": 2,
        "nightly_rate": Decimal("95.50"),
        "cleaning_fee": Decimal("25.00"),
        "instant_book": True,
        "cancellation_policy": CancellationPolicy.STRICT,
    },
]


async def seed() -> None:
    """Populate the database with demo data.

    Idempotent: removes the demo host's existing properties (and with them
    their bookings and ledger days) before re-seeding.
    """
    host = CallerIdentity(id=DEMO_HOST_ID, role=Role.HOST)
    guest = CallerIdentity(id=DEMO_GUEST_ID, role=Role.GUEST)

    async with async_session_factory() as session:
        result = await session.execute(select(Property.id).where(Property.host_id == DEMO_HOST_ID))
        existing_ids = list(result.scalars().all())
        if existing_ids:
            print(f"⚠️  Demo host already has {len(existing_ids)} properties. Deleting and re-seeding...")
            await session.execute(delete(Availability).where(Availability.property_id.in_(existing_ids)))
            await session.execute(delete(Booking).where(Booking.property_id.in_(existing_ids)))
            await session.execute(delete(Property).where(Property.id.in_(existing_ids)))
            await session.commit()

        # ------------------------------------------------------------------
        # 1. Properties and their availability horizon
        # ------------------------------------------------------------------
        today = utcnow().date()
        created: list[Property] = []
        for prop_data in PROPERTIES:
            prop = Property(host_id=DEMO_HOST_ID, **prop_data)
            session.add(prop)
            await session.flush()
            await seed_horizon(session, prop.id, today, settings.availability_horizon_days)
            created.append(prop)
            print(f"   🏠 {prop.title} (${prop.nightly_rate}/night, {prop.cancellation_policy.value})")
        await session.commit()

        loft, cottage, cabin = created

        # ------------------------------------------------------------------
        # 2. Bookings through the admission path
        # ------------------------------------------------------------------
        paid = await create_booking(
            session, guest, loft.id, today + timedelta(days=10), today + timedelta(days=13), GuestCounts(adults=2)
        )
        await lifecycle.mark_paid(session, SYSTEM_CALLER, paid.id, "seed-payment-001")

        requested = await create_booking(
            session,
            guest,
            cottage.id,
            today + timedelta(days=30),
            today + timedelta(days=35),
            GuestCounts(adults=2, children=2),
            special_requests="Late arrival, around 10pm.",
        )

        held = await create_booking(
            session, guest, cabin.id, today + timedelta(days=5), today + timedelta(days=7), GuestCounts(adults=1)
        )

        # ------------------------------------------------------------------
        # 3. A host blackout
        # ------------------------------------------------------------------
        await set_blackout(
            session, host, cottage.id, today + timedelta(days=60), today + timedelta(days=67), "Owner's week"
        )

    print(f"✅ Created {len(created)} properties")
    print(f"✅ Created 3 bookings: {paid.id} (confirmed), {requested.id} (requested), {held.id} (awaiting payment)")
    print()
    print("=" * 60)
    print("🔑 Demo tokens")
    print("=" * 60)
    print(f"   Host:   {create_access_token(str(DEMO_HOST_ID), Role.HOST)}")
    print(f"   Guest:  {create_access_token(str(DEMO_GUEST_ID), Role.GUEST)}")
    print(f"   System: {create_access_token(str(SYSTEM_CALLER.id), Role.SYSTEM)}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(seed())
