"""Async database engine and session factory for Apiary.

Usage:
    from apiary.db.session import build_session_factory

    engine, factory = build_session_factory(settings.database_url)
    async with factory() as session:
        result = await session.execute(select(Hive))

IMPORTANT: Each request/operation must get its own session from the factory.
AsyncSession is NOT safe to share across concurrent coroutines or requests.
The application factory builds the engine once at startup and stores both on
``app.state``; the ``get_async_session`` dependency hands every request a
fresh session that is closed when the request finishes.
"""

from __future__ import annotations

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from apiary.db.models import Base


def build_session_factory(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create the process-wide async engine and its session factory.

    Pool sizing only applies to server databases; SQLite uses the dialect's
    default pool.

    Returns:
        ``(engine, session_factory)``.  Call ``session_factory()`` to get a new
        session; ``expire_on_commit=False`` keeps ORM objects readable after
        commit so routes can serialize them.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(url, echo=False)
    else:
        engine = create_async_engine(url, echo=False, pool_size=10, max_overflow=20)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    return engine, factory


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet (dev and test databases)."""
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


async def get_async_session(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a fresh AsyncSession for each request."""
    async with request.app.state.session_factory() as session:
        yield session
