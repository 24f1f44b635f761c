"""Database access for the direct Postgres note store"""

from app.db.session import get_engine, get_pool_stats, get_session_factory

__all__ = ["get_engine", "get_pool_stats", "get_session_factory"]
