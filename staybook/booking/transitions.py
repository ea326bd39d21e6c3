"""Booking lifecycle transition table.

Only the transitions listed in ``TRANSITIONS`` are legal; anything else is
rejected with ``InvalidTransitionError`` before any side effect runs.
"""

from dataclasses import dataclass
from enum import Enum

from staybook.errors import InvalidTransitionError
from staybook.models.enums import BookingStatus


class Action(str, Enum):
    APPROVE = "approve"
    DECLINE = "decline"
    CANCEL = "cancel"
    MARK_PAID = "mark-paid"
    CHECK_IN = "check-in"
    COMPLETE = "complete"


class Gate(str, Enum):
    """Who may perform an action on a given booking."""

    HOST = "host"
    GUEST_OR_HOST = "guest_or_host"
    SYSTEM = "system"


@dataclass(frozen=True)
class TransitionRule:
    action: Action
    sources: frozenset[BookingStatus]
    target: BookingStatus
    gate: Gate
    releases_dates: bool = False


TRANSITIONS: dict[Action, TransitionRule] = {
    Action.APPROVE: TransitionRule(
        action=Action.APPROVE,
        sources=frozenset({BookingStatus.REQUESTED}),
        target=BookingStatus.APPROVED,
        gate=Gate.HOST,
    ),
    Action.DECLINE: TransitionRule(
        action=Action.DECLINE,
        sources=frozenset({BookingStatus.REQUESTED, BookingStatus.APPROVED}),
        target=BookingStatus.REJECTED,
        gate=Gate.HOST,
        releases_dates=True,
    ),
    Action.CANCEL: TransitionRule(
        action=Action.CANCEL,
        sources=frozenset(
            {
                BookingStatus.REQUESTED,
                BookingStatus.AWAITING_PAYMENT,
                BookingStatus.APPROVED,
                BookingStatus.CONFIRMED,
                BookingStatus.CHECKED_IN,
            }
        ),
        target=BookingStatus.CANCELLED,
        gate=Gate.GUEST_OR_HOST,
        releases_dates=True,
    ),
    Action.MARK_PAID: TransitionRule(
        action=Action.MARK_PAID,
        sources=frozenset({BookingStatus.REQUESTED, BookingStatus.APPROVED, BookingStatus.AWAITING_PAYMENT}),
        target=BookingStatus.CONFIRMED,
        gate=Gate.SYSTEM,
    ),
    Action.CHECK_IN: TransitionRule(
        action=Action.CHECK_IN,
        sources=frozenset({BookingStatus.CONFIRMED}),
        target=BookingStatus.CHECKED_IN,
        gate=Gate.HOST,
    ),
    Action.COMPLETE: TransitionRule(
        action=Action.COMPLETE,
        sources=frozenset({BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN}),
        target=BookingStatus.COMPLETED,
        gate=Gate.GUEST_OR_HOST,
    ),
}

DELETABLE_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.REJECTED})


def resolve_transition(action: Action | str, current: BookingStatus) -> TransitionRule:
    """Return the rule for ``action`` if it is legal from ``current``."""
    rule = TRANSITIONS[Action(action)]
    if current not in rule.sources:
        raise InvalidTransitionError(rule.action.value, current)
    return rule


def allowed_actions(current: BookingStatus) -> list[Action]:
    """Actions that are legal from ``current``, in table order."""
    return [action for action, rule in TRANSITIONS.items() if current in rule.sources]
