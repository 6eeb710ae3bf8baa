"""Database configuration."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from gatepass.config import settings


def _engine_options() -> dict:
    options = {"echo": settings.DB_ECHO, "future": True}
    if settings.is_sqlite:
        # aiosqlite connections must not outlive the event loop that opened them
        options["poolclass"] = NullPool
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options())

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base model class."""

    pass


async def create_db_and_tables():
    """Create database tables."""
    from gatepass import models  # noqa: F401  register tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session."""
    async with async_session_maker() as session:
        yield session
