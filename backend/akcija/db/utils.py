"""Database helpers used by scripts and the scheduler."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from akcija.db.session import async_session_factory, engine
from akcija.models import Base

logger = structlog.get_logger(__name__)


async def init_db() -> None:
    """Create the deals and scrape_runs tables if they are missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_initialized", tables=sorted(Base.metadata.tables))


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Open a session that rolls back on error.

    Writers commit on their own cadence, so nothing is committed here.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
