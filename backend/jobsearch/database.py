from typing import Tuple

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def to_async_url(database_url: str) -> str:
    """Convert sqlite:/// to sqlite+aiosqlite:///"""
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return database_url


def create_session_factory(
    database_url: str,
) -> Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    Build an engine and session factory for one event loop.

    The worker owns its engine for the lifetime of the process and
    disposes it on shutdown.

    Returns:
        (engine, session factory)
    """
    engine = create_async_engine(to_async_url(database_url), echo=False)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine, factory


async def init_db(engine: AsyncEngine) -> None:
    # Register tables on Base.metadata
    import jobsearch.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
