"""
Auth endpoints
==============

POST /api/v1/register -- create a user and issue a token
POST /api/v1/login    -- exchange credentials for a token
POST /api/v1/logout   -- revoke the token used for this request
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.api.dependencies import get_auth_context, get_db
from ridehail.api.middleware import limiter
from ridehail.api.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from ridehail.config import settings
from ridehail.services.auth_service import AuthContext, AuthService

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    summary="Register a passenger or driver",
)
@limiter.limit(settings.auth_rate_limit)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    user, token = await AuthService(db).register(
        name=body.name,
        email=body.email,
        phone=body.phone,
        password=body.password,
        role=body.role,
    )
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse, summary="Log in")
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user, token = await AuthService(db).login(body.email, body.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/logout", response_model=MessageResponse, summary="Log out")
async def logout(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await AuthService(db).logout(auth)
    return MessageResponse(message="Logged out")
