import logging
from datetime import date

import dramatiq

from analytics.rollup import run_daily_archival, run_hourly_trim
from db import crud
from db.database import get_background_session

logger = logging.getLogger(__name__)


@dramatiq.actor(time_limit=60 * 1000, priority=10, max_retries=3)
async def increment_content_view_count(content_id: int, delta: int = 1):
    """Add ``delta`` to the lifetime view counter in its own transaction."""
    async with get_background_session() as session:
        updated = await crud.bump_lifetime_view_count(session, content_id, delta)
        await session.commit()
    if not updated:
        logger.info(f"Content {content_id} no longer exists, view count not updated")


@dramatiq.actor(time_limit=10 * 60 * 1000, priority=5, max_retries=3)
async def archive_daily_metrics(target_date: str | None = None):
    stat_date = date.fromisoformat(target_date) if target_date else None
    await run_daily_archival(stat_date)


@dramatiq.actor(time_limit=5 * 60 * 1000, priority=5, max_retries=3)
async def trim_leaderboard():
    await run_hourly_trim()
