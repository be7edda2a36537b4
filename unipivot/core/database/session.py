"""
Global database session and engine management.

This module manages the global AsyncEngine and async_sessionmaker instances
that are used throughout the application for database access.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.server.core.config import settings

from ..logging_config import get_logger
from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

# Create global engine and session factory
engine = create_engine(settings.database.url, echo=settings.database.echo)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Yields:
        AsyncSession: An asynchronous SQLAlchemy session.
    """
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """
    Initialize the database.

    In production, Alembic migrations handle all DDL and this is a no-op.
    With ``DATABASE__CREATE_TABLES=true`` the tables are created straight from
    the ORM metadata, which is handy for local development on SQLite.
    """
    if not settings.database.create_tables:
        logger.debug("Skipping table creation, schema is managed by Alembic")
        return
    await create_all(engine)
    logger.info("Database tables created from ORM metadata")
