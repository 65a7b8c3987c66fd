"""Trip lifecycle transitions (PENDING -> ACCEPTED -> COMPLETED | CANCELED)."""

from __future__ import annotations

from .enums import TRIP_TRANSITIONS, TripStatus
from .errors import InvalidStateTransition


def can_transition(current: TripStatus, new_status: TripStatus) -> bool:
    return TripStatus(new_status) in TRIP_TRANSITIONS.get(TripStatus(current), set())


def check_transition(current: TripStatus, new_status: TripStatus) -> TripStatus:
    """Return *new_status* if moving there from *current* is legal, else raise."""
    if not can_transition(current, new_status):
        raise InvalidStateTransition(
            f"Cannot transition from {TripStatus(current).value} "
            f"to {TripStatus(new_status).value}"
        )
    return TripStatus(new_status)


def is_terminal(status: TripStatus) -> bool:
    return not TRIP_TRANSITIONS.get(TripStatus(status))
