"""
Review endpoints
================

GET  /api/v1/reviews/{driver_id} -- reviews left for a driver (cached)
POST /api/v1/reviews/{driver_id} -- review a driver (needs a completed trip)
"""

from __future__ import annotations

from functools import partial

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.api.dependencies import get_auth_context, get_cache, get_db
from ridehail.api.schemas import (
    ERROR_RESPONSES,
    INVALID_DRIVER_RESPONSE,
    ReviewCreateRequest,
    ReviewPage,
    ReviewResponse,
    page_payload,
)
from ridehail.config import settings
from ridehail.infrastructure.cache import ListCache
from ridehail.services.auth_service import AuthContext
from ridehail.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"], responses=ERROR_RESPONSES)


@router.get("/{driver_id}", response_model=ReviewPage, summary="List a driver's reviews")
async def list_reviews(
    driver_id: int,
    page: int = Query(1, ge=1),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    cache: ListCache = Depends(get_cache),
):
    render = partial(
        page_payload, page=page, per_page=settings.page_size, schema=ReviewResponse
    )
    return await ReviewService(db, cache).list_page(
        driver_id, page, settings.page_size, render
    )


@router.post(
    "/{driver_id}",
    status_code=201,
    responses=INVALID_DRIVER_RESPONSE,
    response_model=ReviewResponse,
    summary="Review a driver",
    description="Only passengers with at least one completed trip may review.",
)
async def create_review(
    driver_id: int,
    body: ReviewCreateRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    cache: ListCache = Depends(get_cache),
):
    return await ReviewService(db, cache).create(
        auth.user, driver_id, rating=body.rating, comment=body.comment
    )
