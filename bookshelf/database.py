"""
Bookshelf — Database Engine and Session Management
===================================================

What:  Async SQLAlchemy engine, session factory and FastAPI session dependency.
How:   The application lifespan builds one engine (one connection pool) from
       settings and keeps it, with its session factory, on `app.state`.
       Each request gets its own AsyncSession from that factory.
Who:   Used by main.py (lifespan), the schema bootstrapper, the health check
       and the repository dependency.

Connection Pooling:
    pool_size / max_overflow:  Persistent and burst connections
    pool_pre_ping:             Validates connections before use
    pool_timeout:              Bounded wait for a free connection
    pool_recycle=3600:         Recycles connections every hour
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from bookshelf.config import Settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models; owns the shared metadata."""
    pass


# ── Engine & Session Factory ──────────────────────────────────────────────
def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the async engine (and its connection pool) for `settings`."""
    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=3600,
        # SQL echo only when debugging
        echo=settings.log_level == "DEBUG",
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Build the per-request session factory.

    expire_on_commit=False keeps returned Book rows readable after the
    repository commits, outside of any further database round-trip.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory stored on app.state
        2. Yields it to the repository (which commits its own writes)
        3. On error: rolls back anything left open
        4. Always: closes the session (returns the connection to the pool)

    Creating the session does not touch the database; a connection is only
    checked out on the first statement.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
