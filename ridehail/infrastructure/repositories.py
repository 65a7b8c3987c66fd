"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  Writes flush and refresh so server-side
defaults (timestamps) are loaded before the session is left.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from sqlalchemy import Date, Select, delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AccessTokenModel, CarModel, ReviewModel, TripModel, UserModel
from ridehail.domain.enums import TripStatus


async def paginate(
    session: AsyncSession, query: Select, page: int, per_page: int
) -> tuple[list[Any], int]:
    """Run *query* for one page. Returns ``(items, total)``."""
    total = (
        await session.execute(
            select(func.count()).select_from(query.order_by(None).subquery())
        )
    ).scalar() or 0
    result = await session.execute(
        query.offset((page - 1) * per_page).limit(per_page)
    )
    return list(result.scalars().all()), total


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalar_one_or_none()

    async def email_taken(self, email: str) -> bool:
        return bool(
            await self.session.scalar(
                select(exists().where(UserModel.email == email))
            )
        )

    async def phone_taken(self, phone: str) -> bool:
        return bool(
            await self.session.scalar(
                select(exists().where(UserModel.phone == phone))
            )
        )


class AccessTokenRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, *, user_id: int, jti: str) -> AccessTokenModel:
        token = AccessTokenModel(user_id=user_id, jti=jti)
        self.session.add(token)
        await self.session.flush()
        return token

    async def get_by_jti(self, jti: str) -> Optional[AccessTokenModel]:
        result = await self.session.execute(
            select(AccessTokenModel).where(AccessTokenModel.jti == jti)
        )
        return result.scalar_one_or_none()

    async def delete_by_jti(self, jti: str) -> None:
        await self.session.execute(
            delete(AccessTokenModel).where(AccessTokenModel.jti == jti)
        )


class CarRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, car: CarModel) -> CarModel:
        self.session.add(car)
        await self.session.flush()
        await self.session.refresh(car)
        return car

    async def get_by_id(self, car_id: int) -> Optional[CarModel]:
        return await self.session.get(CarModel, car_id)

    async def list_for_owner(
        self, owner_id: int, page: int, per_page: int
    ) -> tuple[list[CarModel], int]:
        query = (
            select(CarModel)
            .where(CarModel.user_id == owner_id)
            .order_by(CarModel.id)
        )
        return await paginate(self.session, query, page, per_page)

    async def delete(self, car: CarModel) -> None:
        await self.session.delete(car)
        await self.session.flush()


class TripRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, trip: TripModel) -> TripModel:
        self.session.add(trip)
        await self.session.flush()
        await self.session.refresh(trip)
        return trip

    async def save(self, trip: TripModel) -> TripModel:
        await self.session.flush()
        await self.session.refresh(trip)
        return trip

    async def get_by_id(self, trip_id: int) -> Optional[TripModel]:
        return await self.session.get(TripModel, trip_id)

    async def get_for_update(self, trip_id: int) -> Optional[TripModel]:
        """SELECT ... FOR UPDATE so the pending check and the write are atomic."""
        result = await self.session.execute(
            select(TripModel)
            .where(TripModel.id == trip_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_passenger(
        self,
        passenger_id: int,
        *,
        status: Optional[TripStatus] = None,
        day: Optional[date] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[TripModel], int]:
        query = select(TripModel).where(TripModel.passenger_id == passenger_id)
        if status is not None:
            query = query.where(TripModel.status == status)
        if day is not None:
            query = query.where(func.date(TripModel.created_at, type_=Date) == day)
        return await paginate(self.session, query.order_by(TripModel.id), page, per_page)

    async def has_trip_with_status(
        self, passenger_id: int, statuses: Sequence[TripStatus]
    ) -> bool:
        return bool(
            await self.session.scalar(
                select(
                    exists().where(
                        TripModel.passenger_id == passenger_id,
                        TripModel.status.in_(list(statuses)),
                    )
                )
            )
        )


class ReviewRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, review: ReviewModel) -> ReviewModel:
        self.session.add(review)
        await self.session.flush()
        await self.session.refresh(review)
        return review

    async def list_for_driver(
        self, driver_id: int, page: int, per_page: int
    ) -> tuple[list[ReviewModel], int]:
        query = (
            select(ReviewModel)
            .where(ReviewModel.driver_id == driver_id)
            .order_by(ReviewModel.id)
        )
        return await paginate(self.session, query, page, per_page)
