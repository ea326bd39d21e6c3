"""Tests for the availability ledger: horizon, blackouts and booking releases."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from staybook.database import utcnow
from staybook.errors import ConflictError, NotPermittedError, ValidationError
from staybook.models.availability import Availability
from staybook.models.enums import AvailabilitySource
from staybook.services import lifecycle
from staybook.services.admission import GuestCounts, create_booking
from staybook.services.availability import (
    clear_blackout,
    get_calendar,
    iter_days,
    seed_horizon,
    set_blackout,
)

pytestmark = pytest.mark.asyncio


def _day(offset: int):
    return utcnow().date() + timedelta(days=offset)


async def test_iter_days_is_half_open() -> None:
    assert list(iter_days(_day(0), _day(3))) == [_day(0), _day(1), _day(2)]


class TestHorizon:
    async def test_seed_is_idempotent(self, db_session, instant_property) -> None:
        property_id = instant_property.id
        count = await db_session.execute(
            select(func.count()).select_from(Availability).where(Availability.property_id == property_id)
        )
        assert count.scalar_one() == 90

        assert await seed_horizon(db_session, property_id, utcnow().date(), 90) == 0
        assert await seed_horizon(db_session, property_id, utcnow().date(), 95) == 5

    async def test_days_without_entries_are_open(self, db_session, instant_property) -> None:
        days = await get_calendar(db_session, instant_property.id, _day(100), _day(103))
        assert [d.available for d in days] == [True, True, True]

    async def test_calendar_range_is_bounded(self, db_session, instant_property) -> None:
        with pytest.raises(ValidationError):
            await get_calendar(db_session, instant_property.id, _day(0), _day(400))


class TestBlackouts:
    async def test_blackout_closes_days(self, db_session, host, instant_property) -> None:
        days = await set_blackout(db_session, host, instant_property.id, _day(5), _day(8), "Painting")

        assert [d.available for d in days] == [False, False, False]
        assert {d.source for d in days} == {AvailabilitySource.MANUAL}
        assert days[0].note == "Painting"

    async def test_blackout_over_booked_days_is_rejected(self, db_session, host, guest, instant_property) -> None:
        property_id = instant_property.id
        await create_booking(db_session, guest, property_id, _day(10), _day(13), GuestCounts())

        with pytest.raises(ConflictError):
            await set_blackout(db_session, host, property_id, _day(12), _day(15))

        days = await get_calendar(db_session, property_id, _day(13), _day(15))
        assert all(d.available for d in days)

    async def test_only_the_host_can_black_out(self, db_session, guest, instant_property) -> None:
        with pytest.raises(NotPermittedError):
            await set_blackout(db_session, guest, instant_property.id, _day(5), _day(8))

    async def test_clear_blackout_leaves_booked_days_closed(self, db_session, host, guest, instant_property) -> None:
        property_id = instant_property.id
        await create_booking(db_session, guest, property_id, _day(10), _day(12), GuestCounts())
        await set_blackout(db_session, host, property_id, _day(14), _day(16))

        days = await clear_blackout(db_session, host, property_id, _day(9), _day(17))
        by_day = {d.date: d for d in days}
        assert by_day[_day(10)].available is False
        assert by_day[_day(10)].source == AvailabilitySource.BOOKING
        assert by_day[_day(14)].available is True
        assert by_day[_day(15)].available is True

    async def test_releasing_a_booking_keeps_blackouts(self, db_session, host, guest, instant_property) -> None:
        property_id = instant_property.id
        booking = await create_booking(db_session, guest, property_id, _day(10), _day(12), GuestCounts())
        await set_blackout(db_session, host, property_id, _day(12), _day(14))

        await lifecycle.cancel(db_session, guest, booking.id)

        days = await get_calendar(db_session, property_id, _day(10), _day(14))
        assert [d.available for d in days] == [True, True, False, False]
        assert days[2].source == AvailabilitySource.MANUAL
