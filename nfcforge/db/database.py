"""
Order database wiring.

One async engine per process, built from NFCFORGE_DATABASE_URL. Placed
orders are the only persisted records; designer sessions live in memory.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from nfcforge.config import settings
from nfcforge.models.db import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create the async engine for an order database URL.

    Server databases (PostgreSQL in production) get pool pre-ping so a
    restarted server does not fail the next checkout. SQLite files and
    in-memory databases have no server connection to go stale.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return create_async_engine(database_url, echo=settings.debug)
    return create_async_engine(database_url, echo=settings.debug, pool_pre_ping=True)


engine = build_engine(settings.database_url)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Session that commits when the block exits and rolls back if it raises.

    The order store runs every save and status change in one of these.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a session for order listings."""
    async with transaction(async_session_factory) as session:
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Dependency that provides the session factory (overridable in tests)."""
    return async_session_factory


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Create the order tables if they do not exist.

    Called once at application startup.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("ORDER_TABLES_READY", extra={"tables": sorted(Base.metadata.tables)})
