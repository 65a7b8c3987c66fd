"""Vehicle registry: drivers register and remove their own cars."""

from __future__ import annotations

import logging
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.domain import policies
from ridehail.domain.errors import NotFound
from ridehail.infrastructure.cache import ListCache, cars_key
from ridehail.infrastructure.models import CarModel, UserModel
from ridehail.infrastructure.repositories import CarRepository

logger = logging.getLogger(__name__)


class CarService:
    def __init__(self, session: AsyncSession, cache: ListCache):
        self.session = session
        self.cars = CarRepository(session)
        self.cache = cache

    async def list_page(
        self,
        actor: UserModel,
        page: int,
        per_page: int,
        render: Callable[[list[CarModel], int], dict[str, Any]],
    ) -> dict[str, Any]:
        """Return one rendered page of the actor's cars, read through the cache."""
        policies.authorize(policies.can_list_cars(actor))
        key = cars_key(actor.id)
        cached = await self.cache.get(key, page)
        if cached is not None:
            return cached
        cars, total = await self.cars.list_for_owner(actor.id, page, per_page)
        payload = render(cars, total)
        await self.cache.set(key, page, payload)
        return payload

    async def create(
        self, actor: UserModel, *, model: str, brand: str, license_plate: str
    ) -> CarModel:
        policies.authorize(policies.can_store_car(actor))
        car = await self.cars.create(
            CarModel(
                user_id=actor.id,
                model=model,
                brand=brand,
                license_plate=license_plate,
            )
        )
        await self.session.commit()
        await self.cache.invalidate(cars_key(actor.id))
        logger.info("Driver %d registered car %d", actor.id, car.id)
        return car

    async def delete(self, actor: UserModel, car_id: int) -> None:
        car = await self.cars.get_by_id(car_id)
        if car is None:
            raise NotFound("Car not found")
        if not policies.can_delete_car(actor, car):
            logger.warning("User %d denied deleting car %d", actor.id, car_id)
            policies.authorize(False)
        owner_id = car.user_id
        await self.cars.delete(car)
        await self.session.commit()
        await self.cache.invalidate(cars_key(owner_id))
        logger.info("Driver %d deleted car %d", actor.id, car_id)
