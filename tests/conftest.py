"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  A single ``StaticPool`` connection is shared
by every session so the app and the test see the same database.  Redis is
replaced by a small in-memory hash store behind the real ``ListCache``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ridehail.domain.enums import UserRole
from ridehail.infrastructure.cache import ListCache
from ridehail.infrastructure.database import Base
from ridehail.infrastructure.models import UserModel
from ridehail.services.auth_service import AuthService


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


class MemoryRedis:
    """The subset of the redis client that ``ListCache`` uses."""

    def __init__(self):
        self.hashes: dict[str, dict[str, str]] = {}
        self.ttls: dict[str, int] = {}

    async def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    async def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value
        return 1

    async def expire(self, key, seconds):
        self.ttls[key] = seconds
        return key in self.hashes

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.hashes.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed


@dataclass
class Actor:
    user: UserModel
    token: str

    @property
    def id(self) -> int:
        return self.user.id

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables, hand out a session factory, then drop everything."""
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def redis() -> MemoryRedis:
    return MemoryRedis()


@pytest.fixture
def cache(redis) -> ListCache:
    return ListCache(redis, ttl_seconds=60)


@pytest.fixture
def make_user(session_factory):
    """Factory: register a user straight through ``AuthService``."""
    counter = {"n": 0}

    async def _make(role: UserRole = UserRole.PASSENGER, name: str | None = None) -> Actor:
        counter["n"] += 1
        n = counter["n"]
        async with session_factory() as session:
            user, token = await AuthService(session).register(
                name=name or f"{role.value.title()} {n}",
                email=f"{role.value}{n}@example.com",
                phone=f"+1555000{n:04d}",
                password="password123",
                role=role,
            )
            await session.commit()
        return Actor(user=user, token=token)

    return _make


@pytest_asyncio.fixture
async def client(session_factory, cache) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by SQLite and the in-memory cache."""
    from ridehail.api.app import create_app
    from ridehail.api.dependencies import get_cache, get_db
    from ridehail.api.middleware import limiter

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def _test_cache():
        return cache

    app = create_app()
    app.dependency_overrides[get_db] = _test_db
    app.dependency_overrides[get_cache] = _test_cache

    limiter.enabled = False
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    limiter.enabled = True
