"""Database engine, session factory and schema lifecycle."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

import config


def make_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Works for both PostgreSQL (psycopg) and SQLite (aiosqlite) URLs.
    """
    return create_async_engine(database_url, echo=False)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Process-wide engine and session factory
engine = make_engine(config.settings.DATABASE_URL)
AsyncSessionLocal = make_session_factory(engine)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncSession:
    """
    Dependency function to get database session.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """
    Create tables that do not exist yet.
    Called on application startup.
    """
    # Register models on Base.metadata
    import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of pooled connections on shutdown."""
    await engine.dispose()
