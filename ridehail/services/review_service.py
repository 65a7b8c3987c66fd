"""
Review eligibility gate.

A passenger may review a driver once they have at least one completed trip.
The check is not scoped to the driver being reviewed, and a passenger may
review the same driver more than once. The reviewed id must belong to a
driver.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.domain import policies
from ridehail.domain.enums import TripStatus, UserRole
from ridehail.domain.errors import InvalidDriver
from ridehail.infrastructure.cache import ListCache, reviews_key
from ridehail.infrastructure.models import ReviewModel, UserModel
from ridehail.infrastructure.repositories import (
    ReviewRepository,
    TripRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, session: AsyncSession, cache: ListCache):
        self.session = session
        self.reviews = ReviewRepository(session)
        self.trips = TripRepository(session)
        self.users = UserRepository(session)
        self.cache = cache

    async def is_eligible(self, actor: UserModel) -> bool:
        has_completed = await self.trips.has_trip_with_status(
            actor.id, [TripStatus.COMPLETED]
        )
        return policies.can_store_review(actor, has_completed)

    async def create(
        self,
        actor: UserModel,
        driver_id: int,
        *,
        rating: int,
        comment: Optional[str] = None,
    ) -> ReviewModel:
        if not await self.is_eligible(actor):
            logger.warning("User %d not eligible to review driver %d", actor.id, driver_id)
            policies.authorize(False)

        driver = await self.users.get_by_id(driver_id)
        if driver is None or UserRole(driver.role) is not UserRole.DRIVER:
            raise InvalidDriver()

        review = await self.reviews.create(
            ReviewModel(
                driver_id=driver_id,
                passenger_id=actor.id,
                rating=rating,
                comment=comment,
            )
        )
        await self.session.commit()
        await self.cache.invalidate(reviews_key(driver_id))
        logger.info("Passenger %d reviewed driver %d", actor.id, driver_id)
        return review

    async def list_page(
        self,
        driver_id: int,
        page: int,
        per_page: int,
        render: Callable[[list[ReviewModel], int], dict[str, Any]],
    ) -> dict[str, Any]:
        key = reviews_key(driver_id)
        cached = await self.cache.get(key, page)
        if cached is not None:
            return cached
        reviews, total = await self.reviews.list_for_driver(driver_id, page, per_page)
        payload = render(reviews, total)
        await self.cache.set(key, page, payload)
        return payload
