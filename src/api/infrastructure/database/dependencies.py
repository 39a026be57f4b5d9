"""Database session management.

Provides a lazily created engine and an async context manager that yields
sessions. Callers own transactions through `async with session.begin()`.
"""

from __future__ import annotations

import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_session_factory, create_write_engine
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import get_database_settings

# Module-level probe for observability
_probe = DefaultConnectionProbe()

# Created on first use
_write_engine: AsyncEngine | None = None
_write_sessionmaker: async_sessionmaker[AsyncSession] | None = None

_engine_lock = threading.Lock()


def get_write_engine() -> AsyncEngine:
    """Get the write database engine (singleton).

    Creates the engine and its sessionmaker on first call, using
    double-checked locking.

    Returns:
        Configured async engine
    """
    global _write_engine, _write_sessionmaker
    if _write_engine is None:
        with _engine_lock:
            if _write_engine is None:
                settings = get_database_settings()
                _write_engine = create_write_engine(settings)
                _write_sessionmaker = create_session_factory(_write_engine)
                _probe.engine_created(
                    host=settings.host,
                    database=settings.database,
                    pool_size=settings.pool_max_connections,
                )
    return _write_engine


@asynccontextmanager
async def get_write_session() -> AsyncIterator[AsyncSession]:
    """Provide a session for one unit of work.

    The session does NOT auto-commit:

        async with get_write_session() as session:
            service = get_group_service(session, directory, notifier)
            await service.add_member(group_id, user_id)

    Yields:
        AsyncSession for database operations
    """
    get_write_engine()
    assert _write_sessionmaker is not None

    async with _write_sessionmaker() as session:
        try:
            yield session
        except Exception as e:
            _probe.session_failed(e)
            raise


async def close_database_connections() -> None:
    """Dispose the engine and reset the sessionmaker.

    Should be called on shutdown; a later call to get_write_engine()
    creates a fresh engine.
    """
    global _write_engine, _write_sessionmaker

    if _write_engine is not None:
        await _write_engine.dispose()
        _probe.pool_closed()
        _write_engine = None
        _write_sessionmaker = None
