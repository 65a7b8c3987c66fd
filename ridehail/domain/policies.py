"""
Access control predicates.

Each predicate takes the acting user (and the target entity where relevant)
and answers allow / deny.  They never touch storage: anything that needs a
lookup, such as whether a passenger has finished a trip, is resolved by the
caller and passed in.  ``authorize`` turns a denial into ``Forbidden``.
"""

from __future__ import annotations

from .enums import TripStatus, UserRole
from .errors import Forbidden


def _is_driver(actor) -> bool:
    return UserRole(actor.role) is UserRole.DRIVER


def _is_passenger(actor) -> bool:
    return UserRole(actor.role) is UserRole.PASSENGER


# ── Cars ──────────────────────────────────────────────────────────────


def can_list_cars(actor) -> bool:
    return _is_driver(actor)


def can_store_car(actor) -> bool:
    return _is_driver(actor)


def can_delete_car(actor, car) -> bool:
    return _is_driver(actor) and actor.id == car.user_id


# ── Trips ─────────────────────────────────────────────────────────────


def can_view_trip(actor, trip) -> bool:
    return actor.id in (trip.passenger_id, trip.driver_id)


def can_update_trip(actor, trip) -> bool:
    return (
        actor.id == trip.passenger_id
        and TripStatus(trip.status) is TripStatus.PENDING
    )


def can_cancel_trip(actor, trip) -> bool:
    return can_update_trip(actor, trip)


# ── Reviews ───────────────────────────────────────────────────────────


def can_store_review(actor, has_completed_trip: bool) -> bool:
    return _is_passenger(actor) and has_completed_trip


def authorize(allowed: bool, message: str | None = None) -> None:
    if not allowed:
        raise Forbidden(message)
