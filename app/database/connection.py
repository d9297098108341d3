"""
Database Connection Module
Configures async SQLAlchemy engine and session factory.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings
from app.database.base import Base

# Disable SQLAlchemy engine query logging
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

# Create async engine with connection pooling
async_engine = create_async_engine(
    settings.database_url,
    echo=False,  # Disable SQL query logging
    future=True,
    pool_pre_ping=True,  # Verify connections before use
)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create a session factory bound to an engine.

    Used for the application engine below and for throwaway engines
    in scripts and tests.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Don't expire objects after commit
        autocommit=False,
        autoflush=False,
    )


# Session factory for creating new sessions
async_session_factory = build_session_factory(async_engine)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides an async database session.

    Usage:
        @app.get("/items")
        async def get_items(session: AsyncSession = Depends(get_async_session)):
            ...

    Yields:
        AsyncSession: An async SQLAlchemy session.

    Note:
        The session is automatically closed after the request completes.
        Transactions are committed automatically on success, rolled back on error.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(engine: AsyncEngine = async_engine) -> None:
    """
    Initialize database tables.

    Note:
        In production, use Alembic migrations instead.
        This is useful for testing and initial development.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """
    Close database connections.
    Call this during application shutdown.
    """
    await async_engine.dispose()
