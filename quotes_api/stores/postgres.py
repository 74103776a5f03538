"""Relational store with async SQLAlchemy.

Handles:
- Engine and session lifecycle
- Commit/rollback per session scope
- Connection pooling (PostgreSQL) or a single-file embedded DB (SQLite)
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from quotes_api.settings import get_settings


class DatabaseNotInitializedError(RuntimeError):
    """Session or schema requested before init_db()."""


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


# Engine and session factory (initialized on startup)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(url: str, timeout: float, echo: bool) -> dict[str, Any]:
    """Build create_async_engine kwargs bounded by the storage timeout."""
    if url.startswith("sqlite"):
        # sqlite busy timeout; pools are managed by the dialect
        return {"echo": echo, "connect_args": {"timeout": timeout}}
    return {
        "echo": echo,
        "connect_args": {"timeout": timeout, "command_timeout": timeout},
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
        "pool_timeout": timeout,
    }


async def init_db(database_url: str | None = None) -> None:
    """Initialize database engine and session factory.

    Args:
        database_url: Override for settings.database_url (tests use SQLite).
    """
    global _engine, _session_factory

    settings = get_settings()
    url = database_url or settings.async_database_url
    _engine = create_async_engine(url, **_engine_options(url, settings.storage_timeout, settings.debug))
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def ping_db() -> None:
    """Run a trivial statement to validate connectivity."""
    async with get_session() as session:
        await session.execute(text("SELECT 1"))


async def close_db() -> None:
    """Close database connection pool."""
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session context manager.

    Usage:
        async with get_session() as session:
            result = await session.execute(query)
    """
    if _session_factory is None:
        raise DatabaseNotInitializedError("Database not initialized. Call init_db() first.")

    async with _session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create all tables (for development/testing only)."""
    if _engine is None:
        raise DatabaseNotInitializedError("Database not initialized. Call init_db() first.")

    # Register models on Base.metadata
    import quotes_api.models  # noqa: F401

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
    """Drop all tables (for testing only)."""
    if _engine is None:
        raise DatabaseNotInitializedError("Database not initialized. Call init_db() first.")

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
