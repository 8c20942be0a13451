"""
Async Postgres engine and sessions for the presentation repository.

The engine is created on first use from ``config.database_url``
(``postgresql+asyncpg://...``) and torn down with :func:`dispose_engine`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from slidesmith.configs.config import config

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _engine, _session_factory
    if not config.database_url:
        raise RuntimeError("DATABASE_URL not configured")
    if _session_factory is None:
        _engine = create_async_engine(
            config.database_url, echo=config.db_echo, pool_pre_ping=True
        )
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
        logger.debug("Created async database engine")
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a session bound to the shared engine.

    Raises RuntimeError when no database is configured.
    """
    async with _get_session_factory()() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections (server shutdown, end of a CLI command)."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.debug("Disposed async database engine")
    _engine = None
    _session_factory = None
