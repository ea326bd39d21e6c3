"""Unit tests for the lifecycle transition table."""

import pytest

from staybook.booking.transitions import Action, allowed_actions, resolve_transition
from staybook.errors import InvalidTransitionError
from staybook.models.enums import TERMINAL_STATUSES, BookingStatus


class TestResolveTransition:
    @pytest.mark.parametrize(
        ("action", "source", "target"),
        [
            (Action.APPROVE, BookingStatus.REQUESTED, BookingStatus.APPROVED),
            (Action.DECLINE, BookingStatus.APPROVED, BookingStatus.REJECTED),
            (Action.CANCEL, BookingStatus.CHECKED_IN, BookingStatus.CANCELLED),
            (Action.MARK_PAID, BookingStatus.AWAITING_PAYMENT, BookingStatus.CONFIRMED),
            (Action.MARK_PAID, BookingStatus.APPROVED, BookingStatus.CONFIRMED),
            (Action.CHECK_IN, BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN),
            (Action.COMPLETE, BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
        ],
    )
    def test_legal(self, action, source, target):
        assert resolve_transition(action, source).target == target

    def test_accepts_action_name(self):
        assert resolve_transition("check-in", BookingStatus.CONFIRMED).action == Action.CHECK_IN

    def test_check_in_from_requested_is_rejected(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            resolve_transition(Action.CHECK_IN, BookingStatus.REQUESTED)
        assert exc_info.value.current_status == "REQUESTED"
        assert exc_info.value.to_dict()["current_status"] == "REQUESTED"

    def test_cannot_approve_instant_booking(self):
        with pytest.raises(InvalidTransitionError):
            resolve_transition(Action.APPROVE, BookingStatus.AWAITING_PAYMENT)

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_statuses_have_no_exit(self, terminal):
        assert allowed_actions(terminal) == []


class TestReleasesDates:
    def test_decline_and_cancel_release(self):
        assert resolve_transition(Action.DECLINE, BookingStatus.REQUESTED).releases_dates is True
        assert resolve_transition(Action.CANCEL, BookingStatus.CONFIRMED).releases_dates is True

    def test_approve_keeps_dates(self):
        assert resolve_transition(Action.APPROVE, BookingStatus.REQUESTED).releases_dates is False


def test_allowed_actions_from_confirmed():
    assert allowed_actions(BookingStatus.CONFIRMED) == [Action.CANCEL, Action.CHECK_IN, Action.COMPLETE]
