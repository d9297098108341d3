"""
Database Package
Handles database connection, session management, and base models.
"""

from app.database.connection import (
    async_engine,
    async_session_factory,
    build_session_factory,
    get_async_session,
    init_db,
    close_db,
)
from app.database.base import Base, TimestampMixin, UUIDMixin

__all__ = [
    # Connection
    "async_engine",
    "async_session_factory",
    "build_session_factory",
    "get_async_session",
    "init_db",
    "close_db",
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
]
