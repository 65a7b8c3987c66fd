"""
Async SQLAlchemy engine and session factory.

Production runs on PostgreSQL through ``asyncpg``; the tests build their own
SQLite engine and reuse ``Base.metadata``.  Sessions keep attributes loaded
after commit so responses can be rendered once the unit of work is closed.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from ridehail.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for users, tokens, cars, trips and reviews."""
