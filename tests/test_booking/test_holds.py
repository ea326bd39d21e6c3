"""Unit tests for the hold policy."""

from datetime import datetime, timedelta

from staybook.booking.holds import (
    approval_hold_deadline,
    is_hold_expired,
    resolve_hold_policy,
)
from staybook.models.enums import BookingStatus

NOW = datetime(2026, 5, 1, 12, 0)


class TestResolveHoldPolicy:
    def test_instant_book(self):
        policy = resolve_hold_policy(instant_book=True, request_to_book=False)
        assert policy.is_instant_book is True
        assert policy.initial_status == BookingStatus.AWAITING_PAYMENT
        assert policy.expires_at(NOW) == NOW + timedelta(minutes=15)

    def test_request_to_book_uses_approval_window(self):
        policy = resolve_hold_policy(instant_book=False, request_to_book=True, approval_window_hours=48)
        assert policy.initial_status == BookingStatus.REQUESTED
        assert policy.expires_at(NOW) == NOW + timedelta(hours=48)

    def test_request_to_book_wins_over_instant_book(self):
        policy = resolve_hold_policy(instant_book=True, request_to_book=True)
        assert policy.is_instant_book is False
        assert policy.initial_status == BookingStatus.REQUESTED
        assert policy.expires_at(NOW) == NOW + timedelta(hours=24)

    def test_neither_flag_is_requested_with_short_hold(self):
        policy = resolve_hold_policy(instant_book=False, request_to_book=False)
        assert policy.initial_status == BookingStatus.REQUESTED
        assert policy.hold_minutes == 15


class TestHoldExpiry:
    def test_expired_at_deadline(self):
        assert is_hold_expired(NOW, NOW) is True

    def test_not_expired_before_deadline(self):
        assert is_hold_expired(NOW + timedelta(seconds=1), NOW) is False

    def test_no_hold_never_expires(self):
        assert is_hold_expired(None, NOW) is False

    def test_approval_gives_48_hours(self):
        assert approval_hold_deadline(NOW) == NOW + timedelta(hours=48)
