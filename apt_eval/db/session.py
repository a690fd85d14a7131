"""Async database engine and session helpers."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from apt_eval.config import Settings, get_settings
from apt_eval.models import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Build a pooled async engine for the SQLite database file."""

    return create_async_engine(
        settings.database_url,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=0,
        pool_timeout=settings.db_pool_timeout_seconds,
        pool_recycle=settings.db_pool_recycle_seconds,
        pool_pre_ping=True,
        connect_args={"timeout": settings.db_busy_timeout_seconds},
        echo=settings.sql_echo,
    )


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Return a cached async SQLAlchemy engine.

    ``settings`` only matters for the first call; later calls reuse the engine.
    """

    global _engine
    if _engine is None:
        _engine = create_engine_from_settings(settings or get_settings())
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Return a cached async sessionmaker."""

    global _sessionmaker
    if _sessionmaker is None:
        _sessionmaker = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _sessionmaker


async def init_db(settings: Settings | None = None) -> None:
    """Create the data directory and the schema if they do not exist."""

    settings = settings or get_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    async with get_engine(settings).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database schema initialized at %s", settings.database_path)


async def dispose_engine() -> None:
    """Close pooled connections and forget the cached engine."""

    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None


@asynccontextmanager
async def session_context() -> AsyncIterator[AsyncSession]:
    """Yield an async database session within a context manager."""

    session = get_sessionmaker()()
    try:
        yield session
    finally:
        await session.close()


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency for async DB session injection."""

    async with session_context() as session:
        yield session
