"""Async engine, session factory and the shared declarative base.

Repositories never commit: the application service owns the transaction
(`commit()` / `rollback()` or `async with db.begin()`).
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the read-side ORM mirrors (users, royalty tables)."""


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one AsyncSession per request, closed afterwards.

    Uncommitted work is rolled back on close, so a handler that raises
    before its service commits leaves nothing behind.
    """
    async with async_session_factory() as session:
        yield session
