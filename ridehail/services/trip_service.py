"""
Trip lifecycle engine.

Passengers create trips addressed to a driver, edit them and cancel them,
but only while the trip is still PENDING.  Acceptance and completion are
driven from outside this service through ``advance_status``.  Every status
change goes through the transition table in ``ridehail.domain.enums``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.domain import policies
from ridehail.domain.enums import TripStatus, UserRole
from ridehail.domain.errors import (
    InvalidDriver,
    InvalidStateTransition,
    NotFound,
    ValidationFailed,
)
from ridehail.domain.lifecycle import check_transition
from ridehail.infrastructure.models import TripModel, UserModel
from ridehail.infrastructure.repositories import TripRepository, UserRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("start_address", "end_address", "preferences")

# Statuses another component may move a trip into via ``advance_status``.
EXTERNAL_TARGETS = {TripStatus.ACCEPTED, TripStatus.COMPLETED}


class TripService:
    def __init__(self, session: AsyncSession):
        self.trips = TripRepository(session)
        self.users = UserRepository(session)

    async def create(
        self,
        actor: UserModel,
        *,
        driver_id: int,
        start_address: str,
        end_address: str,
        preferences: Optional[str] = None,
    ) -> TripModel:
        driver = await self.users.get_by_id(driver_id)
        if (
            driver is None
            or UserRole(driver.role) is not UserRole.DRIVER
            or driver.id == actor.id
        ):
            raise InvalidDriver()

        trip = await self.trips.create(
            TripModel(
                passenger_id=actor.id,
                driver_id=driver.id,
                start_address=start_address,
                end_address=end_address,
                preferences=preferences,
                status=TripStatus.PENDING,
            )
        )
        logger.info(
            "Trip %d created by passenger %d for driver %d",
            trip.id, actor.id, driver.id,
        )
        return trip

    async def list(
        self,
        actor: UserModel,
        *,
        status: Optional[TripStatus] = None,
        day: Optional[date] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[TripModel], int]:
        return await self.trips.list_for_passenger(
            actor.id, status=status, day=day, page=page, per_page=per_page
        )

    async def show(self, actor: UserModel, trip_id: int) -> TripModel:
        trip = await self._get(trip_id)
        policies.authorize(policies.can_view_trip(actor, trip))
        return trip

    async def update(
        self, actor: UserModel, trip_id: int, changes: Mapping[str, Any]
    ) -> TripModel:
        fields = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if not fields:
            raise ValidationFailed(
                {name: [f"The {name} field is required."] for name in UPDATABLE_FIELDS}
            )

        trip = await self._get(trip_id, for_update=True)
        if not policies.can_update_trip(actor, trip):
            logger.warning("User %d denied updating trip %d", actor.id, trip_id)
            policies.authorize(False)

        for name, value in fields.items():
            setattr(trip, name, value)
        trip = await self.trips.save(trip)
        logger.info("Trip %d updated (%s)", trip.id, ", ".join(sorted(fields)))
        return trip

    async def update_status(self, trip: TripModel, new_status: TripStatus) -> TripModel:
        """Move *trip* to *new_status*. Callers authorize beforehand."""
        previous = TripStatus(trip.status)
        trip.status = check_transition(previous, new_status)
        trip = await self.trips.save(trip)
        logger.info(
            "Trip %d status %s -> %s", trip.id, previous.value, trip.status.value
        )
        return trip

    async def cancel(self, actor: UserModel, trip_id: int) -> TripModel:
        trip = await self._get(trip_id, for_update=True)
        if not policies.can_cancel_trip(actor, trip):
            logger.warning("User %d denied canceling trip %d", actor.id, trip_id)
            policies.authorize(False)
        return await self.update_status(trip, TripStatus.CANCELED)

    async def advance_status(self, trip_id: int, new_status: TripStatus) -> TripModel:
        """Acceptance / completion hook for the driver-side flow."""
        new_status = TripStatus(new_status)
        if new_status not in EXTERNAL_TARGETS:
            raise InvalidStateTransition(
                f"Trips cannot be advanced to {new_status.value}"
            )
        trip = await self._get(trip_id, for_update=True)
        return await self.update_status(trip, new_status)

    async def _get(self, trip_id: int, *, for_update: bool = False) -> TripModel:
        if for_update:
            trip = await self.trips.get_for_update(trip_id)
        else:
            trip = await self.trips.get_by_id(trip_id)
        if trip is None:
            raise NotFound("Trip not found")
        return trip
