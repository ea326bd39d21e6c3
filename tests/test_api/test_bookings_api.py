"""Tests for booking endpoints."""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

from staybook.database import utcnow

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _future_dates(offset_start: int = 30, nights: int = 3) -> tuple[str, str]:
    """Return a (check_in, check_out) pair safely in the future as ISO strings."""
    check_in = utcnow().date() + timedelta(days=offset_start)
    check_out = check_in + timedelta(days=nights)
    return check_in.isoformat(), check_out.isoformat()


async def _book(client: AsyncClient, headers: dict, property_id, offset: int = 30, nights: int = 3, **extra):
    ci, co = _future_dates(offset, nights)
    return await client.post(
        "/api/v1/bookings",
        json={"property_id": str(property_id), "check_in": ci, "check_out": co, **extra},
        headers=headers,
    )


# ---------------------------------------------------------------------------
# POST /api/v1/bookings
# ---------------------------------------------------------------------------


class TestCreateBooking:
    async def test_create_instant_book(self, client: AsyncClient, guest_headers: dict, instant_property) -> None:
        response = await _book(
            client, guest_headers, instant_property.id, adults=2, special_requests="Late check-in around 10pm"
        )
        assert response.status_code == 201
        data = response.json()
        assert data["property_id"] == str(instant_property.id)
        assert data["status"] == "AWAITING_PAYMENT"
        assert data["payment_status"] == "PENDING"
        assert data["number_of_nights"] == 3
        assert data["guests"] == 2
        assert Decimal(data["total_price"]) == Decimal("389.60")
        assert data["hold_expires_at"] is not None
        assert data["refund_amount"] is None
        assert data["special_requests"] == "Late check-in around 10pm"

    async def test_create_request_to_book(self, client: AsyncClient, guest_headers: dict, request_property) -> None:
        response = await _book(client, guest_headers, request_property.id)
        assert response.status_code == 201
        assert response.json()["status"] == "REQUESTED"

    async def test_overlap_returns_409(
        self, client: AsyncClient, guest_headers: dict, other_guest_headers: dict, instant_property
    ) -> None:
        first = await _book(client, guest_headers, instant_property.id, offset=30)
        assert first.status_code == 201

        second = await _book(client, other_guest_headers, instant_property.id, offset=31)
        assert second.status_code == 409
        assert second.json() == {"detail": "dates unavailable"}

    async def test_too_many_guests(self, client: AsyncClient, guest_headers: dict, instant_property) -> None:
        response = await _book(client, guest_headers, instant_property.id, adults=4, children=1)
        assert response.status_code == 422

    async def test_reversed_dates(self, client: AsyncClient, guest_headers: dict, instant_property) -> None:
        response = await _book(client, guest_headers, instant_property.id, nights=0)
        assert response.status_code == 422

    async def test_unknown_property(self, client: AsyncClient, guest_headers: dict) -> None:
        response = await _book(client, guest_headers, uuid.uuid4())
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# GET /api/v1/bookings
# ---------------------------------------------------------------------------


class TestReadBookings:
    async def test_get_as_guest_and_host(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, instant_property
    ) -> None:
        booking = (await _book(client, guest_headers, instant_property.id)).json()

        for headers in (guest_headers, host_headers):
            response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=headers)
            assert response.status_code == 200
            assert response.json()["id"] == booking["id"]

    async def test_get_as_stranger_is_not_found(
        self, client: AsyncClient, guest_headers: dict, other_guest_headers: dict, instant_property
    ) -> None:
        booking = (await _book(client, guest_headers, instant_property.id)).json()
        response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=other_guest_headers)
        assert response.status_code == 404

    async def test_list_by_role(
        self,
        client: AsyncClient,
        guest_headers: dict,
        other_guest_headers: dict,
        host_headers: dict,
        instant_property,
    ) -> None:
        await _book(client, guest_headers, instant_property.id, offset=10)
        await _book(client, other_guest_headers, instant_property.id, offset=20)

        trips = await client.get("/api/v1/bookings", headers=guest_headers)
        assert trips.status_code == 200
        assert trips.json()["total"] == 1

        reservations = await client.get("/api/v1/bookings", params={"role": "host"}, headers=host_headers)
        assert reservations.json()["total"] == 2

        filtered = await client.get(
            "/api/v1/bookings", params={"role": "host", "status": "CONFIRMED"}, headers=host_headers
        )
        assert filtered.json() == {"items": [], "total": 0}

    async def test_list_pagination(self, client: AsyncClient, guest_headers: dict, instant_property) -> None:
        for offset in (10, 20, 30):
            await _book(client, guest_headers, instant_property.id, offset=offset, nights=2)

        response = await client.get("/api/v1/bookings", params={"skip": 1, "limit": 1}, headers=guest_headers)
        data = response.json()
        assert data["total"] == 3
        assert len(data["items"]) == 1


# ---------------------------------------------------------------------------
# Lifecycle commands
# ---------------------------------------------------------------------------


class TestLifecycleCommands:
    async def test_request_approve_pay_check_in_complete(
        self,
        client: AsyncClient,
        guest_headers: dict,
        host_headers: dict,
        system_headers: dict,
        request_property,
    ) -> None:
        booking = (await _book(client, guest_headers, request_property.id)).json()
        url = f"/api/v1/bookings/{booking['id']}"

        approved = await client.post(f"{url}/approve", headers=host_headers)
        assert approved.status_code == 200
        assert approved.json()["status"] == "APPROVED"

        paid = await client.post(f"{url}/mark-paid", json={"payment_reference": "pi_42"}, headers=system_headers)
        assert paid.status_code == 200
        assert paid.json()["status"] == "CONFIRMED"
        assert paid.json()["payment_reference"] == "pi_42"
        assert paid.json()["hold_expires_at"] is None

        checked_in = await client.post(f"{url}/check-in", headers=host_headers)
        assert checked_in.json()["status"] == "CHECKED_IN"

        completed = await client.post(f"{url}/complete", headers=guest_headers)
        assert completed.json()["status"] == "COMPLETED"

    async def test_invalid_transition_reports_current_status(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, request_property
    ) -> None:
        booking = (await _book(client, guest_headers, request_property.id)).json()

        response = await client.post(f"/api/v1/bookings/{booking['id']}/check-in", headers=host_headers)
        assert response.status_code == 409
        data = response.json()
        assert data["current_status"] == "REQUESTED"
        assert data["action"] == "check-in"

        unchanged = await client.get(f"/api/v1/bookings/{booking['id']}", headers=guest_headers)
        assert unchanged.json()["status"] == "REQUESTED"

    async def test_guest_cannot_approve(
        self, client: AsyncClient, guest_headers: dict, request_property
    ) -> None:
        booking = (await _book(client, guest_headers, request_property.id)).json()
        response = await client.post(f"/api/v1/bookings/{booking['id']}/approve", headers=guest_headers)
        assert response.status_code == 403
        assert response.json() == {"detail": "not permitted"}

    async def test_decline_frees_dates(
        self,
        client: AsyncClient,
        guest_headers: dict,
        other_guest_headers: dict,
        host_headers: dict,
        request_property,
    ) -> None:
        booking = (await _book(client, guest_headers, request_property.id)).json()

        declined = await client.post(
            f"/api/v1/bookings/{booking['id']}/decline", json={"reason": "Not a fit"}, headers=host_headers
        )
        assert declined.status_code == 200
        assert declined.json()["status"] == "REJECTED"
        assert declined.json()["cancellation_reason"] == "Not a fit"

        rebooked = await _book(client, other_guest_headers, request_property.id)
        assert rebooked.status_code == 201

    async def test_cancel_without_body(self, client: AsyncClient, guest_headers: dict, instant_property) -> None:
        booking = (await _book(client, guest_headers, instant_property.id)).json()
        response = await client.post(f"/api/v1/bookings/{booking['id']}/cancel", headers=guest_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
        assert response.json()["cancelled_by"] == "GUEST"

    async def test_cancel_paid_booking_refunds(
        self, client: AsyncClient, guest_headers: dict, system_headers: dict, instant_property
    ) -> None:
        booking = (await _book(client, guest_headers, instant_property.id, offset=30)).json()
        await client.post(f"/api/v1/bookings/{booking['id']}/mark-paid", headers=system_headers)

        response = await client.post(
            f"/api/v1/bookings/{booking['id']}/cancel", json={"reason": "Change of plans"}, headers=guest_headers
        )
        data = response.json()
        assert data["status"] == "CANCELLED"
        assert Decimal(data["refund_amount"]) == Decimal("389.60")
        assert data["payment_status"] == "REFUNDED"

    async def test_delete_cancelled_booking(
        self, client: AsyncClient, guest_headers: dict, instant_property
    ) -> None:
        booking = (await _book(client, guest_headers, instant_property.id)).json()
        url = f"/api/v1/bookings/{booking['id']}"

        not_yet = await client.delete(url, headers=guest_headers)
        assert not_yet.status_code == 409

        await client.post(f"{url}/cancel", headers=guest_headers)
        response = await client.delete(url, headers=guest_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Booking deleted"}

        gone = await client.get(url, headers=guest_headers)
        assert gone.status_code == 404
