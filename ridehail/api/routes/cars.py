"""
Car endpoints (drivers only)
============================

GET    /api/v1/cars          -- list my cars (cached)
POST   /api/v1/cars          -- register a car
DELETE /api/v1/cars/{car_id} -- remove one of my cars
"""

from __future__ import annotations

from functools import partial

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.api.dependencies import get_auth_context, get_cache, get_db
from ridehail.api.schemas import (
    ERROR_RESPONSES,
    CarCreateRequest,
    CarPage,
    CarResponse,
    MessageResponse,
    page_payload,
)
from ridehail.config import settings
from ridehail.infrastructure.cache import ListCache
from ridehail.services.auth_service import AuthContext
from ridehail.services.car_service import CarService

router = APIRouter(prefix="/cars", tags=["cars"], responses=ERROR_RESPONSES)


@router.get("", response_model=CarPage, summary="List my cars")
async def list_cars(
    page: int = Query(1, ge=1),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    cache: ListCache = Depends(get_cache),
):
    render = partial(
        page_payload, page=page, per_page=settings.page_size, schema=CarResponse
    )
    return await CarService(db, cache).list_page(
        auth.user, page, settings.page_size, render
    )


@router.post("", status_code=201, response_model=CarResponse, summary="Register a car")
async def create_car(
    body: CarCreateRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    cache: ListCache = Depends(get_cache),
):
    return await CarService(db, cache).create(
        auth.user,
        model=body.model,
        brand=body.brand,
        license_plate=body.license_plate,
    )


@router.delete("/{car_id}", response_model=MessageResponse, summary="Delete a car")
async def delete_car(
    car_id: int,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    cache: ListCache = Depends(get_cache),
):
    await CarService(db, cache).delete(auth.user, car_id)
    return MessageResponse(message="Car deleted")
