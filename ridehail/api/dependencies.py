"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.config import settings
from ridehail.domain.errors import Unauthenticated
from ridehail.infrastructure.cache import ListCache
from ridehail.infrastructure.database import async_session_factory
from ridehail.infrastructure.redis_client import get_redis
from ridehail.services.auth_service import AuthContext, AuthService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_cache() -> ListCache:
    return ListCache(await get_redis(), ttl_seconds=settings.list_cache_ttl_seconds)


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Resolve the bearer token to the calling user, or fail with 401."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    return await AuthService(db).authenticate(credentials.credentials)
