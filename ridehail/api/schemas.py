"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Optional, Sequence

from pydantic import BaseModel, EmailStr, Field, model_validator

from ridehail.domain.enums import TripStatus, UserRole


# ── Requests ──────────────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=32)
    password: str = Field(..., min_length=8)
    role: UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class CarCreateRequest(BaseModel):
    model: str = Field(..., min_length=1, max_length=255)
    brand: str = Field(..., min_length=1, max_length=255)
    license_plate: str = Field(..., min_length=1, max_length=32)


class TripCreateRequest(BaseModel):
    """Any ``status`` sent by the client is ignored; trips start PENDING."""

    driver_id: int
    start_address: str = Field(..., min_length=1, max_length=255)
    end_address: str = Field(..., min_length=1, max_length=255)
    preferences: Optional[str] = None


class TripUpdateRequest(BaseModel):
    start_address: Optional[str] = Field(None, min_length=1, max_length=255)
    end_address: Optional[str] = Field(None, min_length=1, max_length=255)
    preferences: Optional[str] = None

    @model_validator(mode="after")
    def _require_one_field(self) -> "TripUpdateRequest":
        if self.start_address is None and self.end_address is None and self.preferences is None:
            raise ValueError(
                "At least one of start_address, end_address or preferences is required"
            )
        return self


class ReviewCreateRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


# ── Responses ─────────────────────────────────────────────────────────


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    role: UserRole
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


class CarResponse(BaseModel):
    id: int
    model: str
    brand: str
    license_plate: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TripResponse(BaseModel):
    id: int
    passenger: UserSummary
    driver: Optional[UserSummary] = None
    start_address: str
    end_address: str
    preferences: Optional[str] = None
    status: TripStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReviewResponse(BaseModel):
    id: int
    driver: UserSummary
    passenger: UserSummary
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PageMeta(BaseModel):
    current_page: int
    per_page: int
    total: int
    last_page: int


class TripPage(BaseModel):
    data: list[TripResponse]
    meta: PageMeta


class CarPage(BaseModel):
    data: list[CarResponse]
    meta: PageMeta


class ReviewPage(BaseModel):
    data: list[ReviewResponse]
    meta: PageMeta


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse, "description": "Missing, invalid or revoked token"},
    403: {"model": ErrorResponse, "description": "This action is unauthorized"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
}

INVALID_DRIVER_RESPONSE: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid driver ID"},
}


def page_payload(
    items: Sequence[Any],
    total: int,
    *,
    page: int,
    per_page: int,
    schema: type[BaseModel],
) -> dict[str, Any]:
    """Render ORM rows as a JSON-ready page (also the cached form)."""
    return {
        "data": [schema.model_validate(item).model_dump(mode="json") for item in items],
        "meta": {
            "current_page": page,
            "per_page": per_page,
            "total": total,
            "last_page": max(1, math.ceil(total / per_page)),
        },
    }
