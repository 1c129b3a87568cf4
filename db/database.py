import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from db.config import settings

logger = logging.getLogger(__name__)


def _create_engine(uri: str, pool_size: int, max_overflow: int) -> AsyncEngine:
    return create_async_engine(
        uri,
        echo=False,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


# Primary database; jobs open their own engines via get_background_session
ASYNC_ENGINE = _create_engine(settings.postgres_uri, pool_size=10, max_overflow=20)

# Dashboard reads may go to a replica
ASYNC_READ_ENGINE = (
    _create_engine(settings.postgres_read_uri, pool_size=5, max_overflow=10)
    if settings.postgres_read_uri
    else ASYNC_ENGINE
)


async def get_read_session() -> AsyncGenerator[AsyncSession, None]:
    session = AsyncSession(ASYNC_READ_ENGINE, expire_on_commit=False)
    try:
        yield session
    finally:
        try:
            await session.close()
        except Exception as e:
            logger.warning(f"Error closing read session: {e}")


@asynccontextmanager
async def get_background_session() -> AsyncGenerator[AsyncSession, None]:
    """Session for dramatiq actors and rollup jobs, committed by the caller.

    Actors run on the worker's own event loop and cannot share pooled
    connections with the API loop, so each gets a small throwaway engine.
    """
    engine = _create_engine(settings.postgres_uri, pool_size=2, max_overflow=3)
    try:
        async with AsyncSession(engine, expire_on_commit=False) as session:
            yield session
    finally:
        await engine.dispose()


async def init(retries: int = 5):
    """Check that PostgreSQL is reachable, backing off between attempts."""
    engines = {"primary": ASYNC_ENGINE}
    if settings.postgres_read_uri:
        engines["read replica"] = ASYNC_READ_ENGINE

    for attempt in range(retries):
        try:
            for name, engine in engines.items():
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
                logger.info(f"PostgreSQL {name} connection initialized successfully.")
            return
        except Exception as e:
            if attempt == retries - 1:
                logger.error("Failed to initialize PostgreSQL after several attempts.")
                raise
            wait_time = 2**attempt
            logger.warning(f"Error initializing PostgreSQL: {e}, retrying in {wait_time} seconds...")
            await asyncio.sleep(wait_time)


async def close():
    await ASYNC_ENGINE.dispose()
    if ASYNC_READ_ENGINE is not ASYNC_ENGINE:
        await ASYNC_READ_ENGINE.dispose()
    logger.info("PostgreSQL connections closed.")
