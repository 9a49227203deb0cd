"""Database base class and session management.

This module provides:
- SQLAlchemy base class for declarative models
- Lazily created async engine and session factory
- Table creation and teardown helpers
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ..core.config import Settings, get_settings


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


# =============================================================================
# Engine and Sessions
# =============================================================================

_engine = None
_session_maker = None


def _engine_options(settings: Settings) -> Dict[str, Any]:
    """Pool options are only valid for server databases."""
    if settings.is_sqlite:
        return {}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
    }


def get_engine() -> AsyncEngine:
    """Get or create the database engine."""
    global _engine

    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.DATABASE_URL,
            echo=False,
            **_engine_options(settings),
        )

    return _engine


def get_session_maker() -> async_sessionmaker:
    """Get or create the session maker."""
    global _session_maker

    if _session_maker is None:
        engine = get_engine()
        _session_maker = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _session_maker


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session as an async context manager."""
    session_maker = get_session_maker()
    async with session_maker() as session:
        yield session


# =============================================================================
# Utility Functions
# =============================================================================


async def init_databases():
    """Create all tables."""
    from . import models  # noqa: F401  (registers tables on Base.metadata)

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_databases():
    """Drop all tables (used by tests)."""
    from . import models  # noqa: F401

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def close_all():
    """Close all database connections."""
    global _engine, _session_maker

    if _engine:
        await _engine.dispose()
        _engine = None

    _session_maker = None
