"""
Trip endpoints
==============

GET    /api/v1/trips           -- list the caller's trips (status / date filters)
POST   /api/v1/trips           -- request a trip from a driver
GET    /api/v1/trips/{trip_id} -- trip detail (passenger or driver only)
PATCH  /api/v1/trips/{trip_id} -- edit addresses / preferences while pending
DELETE /api/v1/trips/{trip_id} -- cancel a pending trip
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.api.dependencies import get_auth_context, get_db
from ridehail.api.schemas import (
    ERROR_RESPONSES,
    INVALID_DRIVER_RESPONSE,
    MessageResponse,
    TripCreateRequest,
    TripPage,
    TripResponse,
    TripUpdateRequest,
    page_payload,
)
from ridehail.config import settings
from ridehail.domain.enums import TripStatus
from ridehail.services.auth_service import AuthContext
from ridehail.services.trip_service import TripService

router = APIRouter(prefix="/trips", tags=["trips"], responses=ERROR_RESPONSES)


@router.get("", response_model=TripPage, summary="List my trips")
async def list_trips(
    status: Optional[TripStatus] = Query(None),
    day: Optional[date] = Query(None, alias="date", description="YYYY-MM-DD"),
    page: int = Query(1, ge=1),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    trips, total = await TripService(db).list(
        auth.user, status=status, day=day, page=page, per_page=settings.page_size
    )
    return page_payload(
        trips, total, page=page, per_page=settings.page_size, schema=TripResponse
    )


@router.post(
    "",
    status_code=201,
    responses=INVALID_DRIVER_RESPONSE,
    response_model=TripResponse,
    summary="Request a trip",
)
async def create_trip(
    body: TripCreateRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await TripService(db).create(
        auth.user,
        driver_id=body.driver_id,
        start_address=body.start_address,
        end_address=body.end_address,
        preferences=body.preferences,
    )


@router.get("/{trip_id}", response_model=TripResponse, summary="Get a trip")
async def get_trip(
    trip_id: int,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await TripService(db).show(auth.user, trip_id)


@router.patch(
    "/{trip_id}",
    response_model=TripResponse,
    summary="Update a pending trip",
)
async def update_trip(
    trip_id: int,
    body: TripUpdateRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await TripService(db).update(
        auth.user, trip_id, body.model_dump(exclude_none=True)
    )


@router.delete(
    "/{trip_id}",
    response_model=MessageResponse,
    summary="Cancel a pending trip",
)
async def cancel_trip(
    trip_id: int,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await TripService(db).cancel(auth.user, trip_id)
    return MessageResponse(message="Trip canceled")
