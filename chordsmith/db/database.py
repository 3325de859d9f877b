"""
Async SQLAlchemy database setup.

Supports PostgreSQL (production) and SQLite (development and tests).

The engine and session factory live on an explicitly constructed ``Database``
value created once at process start (see ``chordsmith.main``) and handed to
the components that need it. Nothing here is module-global.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from chordsmith.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


@dataclass
class Database:
    """An engine plus the session factory bound to it."""

    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]

    def session(self) -> AsyncSession:
        """
        Get a new async session.

        Usage:
            async with database.session() as session:
                ...
        """
        return self.session_factory()

    async def ping(self) -> bool:
        """True if a trivial query succeeds."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    async def close(self) -> None:
        """Close database connections."""
        await self.engine.dispose()
        logger.info("Database connection closed")


def get_database_url() -> str:
    """Get the database URL from settings."""
    url = settings.database_url
    if not url:
        # Default to SQLite for development
        url = "sqlite+aiosqlite:///./chordsmith.db"
        logger.warning(f"No database URL configured, using SQLite: {url}")
    return url


def create_database(database_url: str, **engine_kwargs: Any) -> Database:
    """Build an engine and session factory for ``database_url``."""
    connect_args: dict[str, Any] = engine_kwargs.pop("connect_args", {})
    if database_url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)

    engine = create_async_engine(
        database_url,
        echo=settings.debug,
        connect_args=connect_args,
        **engine_kwargs,
    )
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return Database(engine=engine, session_factory=session_factory)


async def init_db(database_url: str | None = None, create_tables: bool = True) -> Database:
    """Initialize the database engine and, unless told otherwise, the cache tables.

    The cache schema is two tables with no migrations history, so it is
    created in place with ``create_all`` (a no-op for tables that exist).
    """
    database_url = database_url or get_database_url()
    logger.info(f"Initializing database: {database_url.split('@')[-1] if '@' in database_url else database_url}")

    database = create_database(database_url)

    # Import models so they register with Base.metadata.
    from chordsmith.db import models  # noqa: F401

    if create_tables:
        async with database.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    logger.info("Database initialized successfully")
    return database


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the process-wide ``Database``."""
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.

    Usage:
        @app.get("/things")
        async def get_things(db: AsyncSession = Depends(get_db)):
            ...
    """
    database = get_database(request)
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
