"""Database connection, session management and unit of work."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from lavajato.config import settings
from lavajato.models.base import Base
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

logger = logging.getLogger(__name__)

engine = None
async_session_maker: Optional[async_sessionmaker] = None


def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """SQLite ignores foreign keys unless every connection turns them on."""
    if async_engine.url.get_backend_name() == "sqlite":
        event.listen(async_engine.sync_engine, "connect", _set_sqlite_pragma)


async def init_db(database_url: Optional[str] = None):
    """Initialize database engine and create tables."""
    global engine, async_session_maker

    url = database_url or settings.DATABASE_URL

    engine = create_async_engine(
        url,
        echo=settings.DEBUG,
        future=True,
        pool_pre_ping=True,
    )
    enable_sqlite_foreign_keys(engine)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    # Create tables if they don't exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Database initialized ({engine.url.get_backend_name()})")


async def close_db():
    """Close database engine."""
    global engine
    if engine:
        await engine.dispose()


def get_session_maker() -> async_sessionmaker:
    """Session factory for work that runs outside a request (notifications)."""
    if async_session_maker is None:
        raise RuntimeError("Database not initialized; call init_db() first")
    return async_session_maker


async def get_db() -> AsyncIterator[AsyncSession]:
    """Get database session."""
    async with get_session_maker()() as session:
        yield session


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit everything written inside the block, or nothing.

    Usage:
        async with unit_of_work(db):
            db.add(appointment)
            await db.flush()
            db.add_all(links)
    """
    try:
        yield db
        await db.commit()
    except Exception as e:
        logger.error(f"Rolling back unit of work: {e}", exc_info=True)
        await db.rollback()
        raise
