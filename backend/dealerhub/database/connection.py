"""
Async engine and session handling for the ``database`` storage backend.

Nothing here runs unless that backend is selected: the engine and the
session factory are built on first use, so the in-memory record store
works without a reachable PostgreSQL server.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from dealerhub.core.config import Settings, get_settings
from dealerhub.core.logging import get_logger

logger = get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def async_database_url(url: str) -> str:
    """Select the asyncpg driver for a plain ``postgresql://`` URL."""
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


def _pool_options(settings: Settings) -> dict[str, Any]:
    # each test runs on its own event loop
    if settings.environment == "test":
        return {"poolclass": NullPool}
    return {"pool_size": settings.db_pool_size, "max_overflow": settings.db_max_overflow}


def get_engine() -> AsyncEngine:
    """
    Return the process-wide engine, creating it on first use.

    Raises:
        RuntimeError: If the engine cannot be created
    """
    global _engine

    if _engine is not None:
        return _engine

    settings = get_settings()
    try:
        _engine = create_async_engine(
            async_database_url(settings.database_url),
            echo=settings.debug,
            pool_pre_ping=True,
            pool_recycle=3600,
            connect_args={
                "server_settings": {"application_name": settings.app_name},
                "command_timeout": 60,
                "timeout": 10,
            },
            **_pool_options(settings),
        )
    except (SQLAlchemyError, ValueError) as e:
        logger.error("Failed to create database engine", error=str(e), error_type=type(e).__name__)
        raise RuntimeError(f"Database engine initialization failed: {e}") from e

    logger.info(
        "Database engine created",
        environment=settings.environment,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Open one unit of work.

    Every write made through the session is committed when the block exits
    normally and rolled back when it raises, so an order and its vehicle, or
    a quote and its contract, are stored together or not at all.
    """
    session = get_session_factory()()
    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.warning(
            "Unit of work rolled back",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
    finally:
        await session.close()


async def check_database_health(max_retries: int = 3, retry_delay: float = 1.0) -> bool:
    """
    Probe the database with ``SELECT 1``, backing off between attempts.

    Returns:
        True once a probe succeeds, False when every attempt failed
    """
    for attempt in range(1, max_retries + 1):
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning(
                "Database health check failed",
                attempt=attempt,
                max_retries=max_retries,
                error=str(e),
                error_type=type(e).__name__,
            )

        if attempt < max_retries:
            await asyncio.sleep(retry_delay * 2 ** (attempt - 1))

    logger.error("Database unreachable", max_retries=max_retries)
    return False


async def close_database_connections() -> None:
    global _engine, _session_factory

    if _engine is None:
        return
    try:
        await _engine.dispose()
        logger.info("Database engine disposed")
    finally:
        _engine = None
        _session_factory = None


async def initialize_database() -> None:
    """
    Build the engine and wait for the database at startup.

    Raises:
        RuntimeError: If the database does not answer
    """
    get_session_factory()
    if not await check_database_health(max_retries=5, retry_delay=2.0):
        raise RuntimeError("Database health check failed during initialization")
    logger.info("Database initialized")
