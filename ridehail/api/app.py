"""
FastAPI application factory.

* Registers routes for auth, trips, cars, reviews and health.
* Maps domain failures (``DomainError`` subclasses) to HTTP responses.
* Applies rate-limiting middleware to the auth endpoints.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ridehail.api.middleware import limiter
from ridehail.api.routes import auth, cars, health, reviews, trips
from ridehail.config import settings
from ridehail.domain.errors import DomainError, Unauthenticated, ValidationFailed
from ridehail.infrastructure.database import engine
from ridehail.infrastructure.redis_client import close_redis

logging.basicConfig(level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release pooled Redis and database connections on shutdown."""
    yield
    await close_redis()
    await engine.dispose()


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if isinstance(exc, ValidationFailed):
        detail = [
            {"loc": ["body", field], "msg": msg, "type": "value_error"}
            for field, messages in exc.errors.items()
            for msg in messages
        ]
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ride Hailing API",
        description=(
            "Passengers request trips from drivers, edit or cancel them while "
            "pending, and review drivers after a completed trip.  Drivers "
            "register the cars they drive."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(DomainError, domain_error_handler)

    # Routers
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(trips.router, prefix="/api/v1")
    app.include_router(cars.router, prefix="/api/v1")
    app.include_router(reviews.router, prefix="/api/v1")
    app.include_router(health.router, prefix="/api/v1")

    return app
