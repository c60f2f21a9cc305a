"""Async SQLAlchemy engine, session factory, and transaction scope.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The pool is the only state shared across requests. Its bounds come from
settings: pool_size steady connections, max_overflow extra under load,
and pool_recycle so idle connections do not outlive the server's timeout.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fitlog.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=settings.pool_size,
    max_overflow=settings.max_overflow,
    pool_recycle=settings.pool_recycle_seconds,
    pool_pre_ping=True,
)

# Session factory: each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """All-or-nothing write scope.

    Commits when the block exits normally. Any exception — including one
    raised by the commit itself — rolls back and propagates.

        async with transaction(db):
            db.add(workout)
            await db.flush()
            db.add_all(entries)
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise
