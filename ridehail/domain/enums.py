"""Domain enumerations and state-transition rules."""

import enum


class UserRole(str, enum.Enum):
    PASSENGER = "passenger"
    DRIVER = "driver"


class TripStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    COMPLETED = "completed"
    CANCELED = "canceled"


# State machine: maps current status -> set of valid next statuses
TRIP_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    TripStatus.PENDING: {
        TripStatus.ACCEPTED,
        TripStatus.COMPLETED,
        TripStatus.CANCELED,
    },
    TripStatus.ACCEPTED: {TripStatus.COMPLETED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELED: set(),
}
