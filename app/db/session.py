"""Database session configuration for the direct Postgres note store"""

import os
import logging
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

logger = logging.getLogger(__name__)

# Connection pool configuration
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))  # Default 5 connections
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))  # Default 10 overflow
POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))  # Default 30 seconds
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))  # Default 1 hour

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


def to_async_url(database_url: str) -> str:
    """
    Convert a Postgres URL to the async psycopg driver format.

    Accepts postgresql://, postgresql+psycopg:// and legacy
    postgresql+asyncpg:// URLs.
    """
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    if database_url.startswith("postgresql+psycopg://"):
        return database_url
    if database_url.startswith("postgresql+asyncpg://"):
        return database_url.replace("postgresql+asyncpg://", "postgresql+psycopg://", 1)
    raise ValueError("Unsupported database URL format (expected a postgresql:// URL)")


def get_engine() -> AsyncEngine:
    """Create the async engine on first use"""
    global _engine, _session_factory

    if _engine is None:
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise ValueError("DATABASE_URL environment variable is not set")

        _engine = create_async_engine(
            to_async_url(database_url),
            pool_pre_ping=True,  # Verify connections before using them
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            echo=False,
        )
        _session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        event.listen(_engine.sync_engine, "invalidate", _on_invalidate)
        logger.info("Database engine created")

    return _engine


async def dispose_engine() -> None:
    """Close pooled connections at shutdown"""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def get_session_factory() -> async_sessionmaker:
    get_engine()
    return _session_factory


def get_pool_stats() -> Optional[dict]:
    """
    Get current connection pool statistics.

    Returns None when the engine has not been created (Supabase backend).
    """
    if _engine is None:
        return None

    pool = _engine.sync_engine.pool
    try:
        return {
            "size": int(pool.size()),
            "checked_in": int(pool.checkedin()),
            "checked_out": int(pool.checkedout()),
            "overflow": max(0, int(pool.overflow())),
            "max_overflow": int(getattr(pool, "_max_overflow", MAX_OVERFLOW)),
        }
    except AttributeError as e:
        logger.warning(f"Error getting pool stats: {e}")
        return {
            "size": POOL_SIZE,
            "checked_in": 0,
            "checked_out": 0,
            "overflow": 0,
            "max_overflow": MAX_OVERFLOW,
        }


def _on_invalidate(dbapi_conn, connection_record, exception):
    """Log when a connection is invalidated"""
    logger.warning(
        f"Database connection invalidated: {exception}",
        exc_info=exception
    )
