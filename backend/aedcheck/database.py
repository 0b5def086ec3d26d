"""
AEDCheck Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, declarative base, the
       per-request session dependency and the startup connectivity probe.
Why:   Centralizes all database connection logic in one place.
How:   An async engine with connection pooling; a session dependency that
       commits on success and rolls back on error; `wait_for_database()`
       retried with tenacity so the app starts cleanly when PostgreSQL comes
       up a few seconds after the API container.
Who:   Route handlers via Depends(get_db_session); main.lifespan for the
       probe and engine disposal.

Connection Pooling Strategy:
    pool_size=20:      persistent connections for normal load
    max_overflow=10:   temporary connections for spikes (total max = 30)
    pool_pre_ping:     validates connections before use
    pool_recycle=3600: recycles connections hourly
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from aedcheck.config import settings

logger = logging.getLogger(__name__)


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=settings.db_pool_pre_ping,
    pool_recycle=3600,
    # SQL echo only in DEBUG; it is very noisy
    echo=settings.log_level == "DEBUG",
)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after the request commits
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Every model registers with this metadata, which Alembic reads for
    --autogenerate.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)

    Multi-step writes inside one request (e.g. approve an inspection, then
    stamp the approver) share this single transaction.
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


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def ping_database() -> None:
    """Run SELECT 1; raises whatever the driver raises on failure."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def wait_for_database() -> None:
    """
    Block until the database answers, retrying with exponential backoff.

    Attempts and the backoff ceiling come from settings
    (DB_CONNECT_ATTEMPTS, DB_CONNECT_MAX_WAIT). The last error is re-raised
    when every attempt fails.
    """
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type((OSError, SQLAlchemyError, TimeoutError)),
        stop=stop_after_attempt(settings.db_connect_attempts),
        wait=wait_exponential_jitter(initial=1, max=settings.db_connect_max_wait, jitter=1),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    ):
        with attempt:
            await ping_database()
    logger.info("Database connection verified")


async def dispose_engine() -> None:
    """Close all pooled connections. Called on application shutdown."""
    await engine.dispose()
