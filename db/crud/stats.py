"""
Daily statistics CRUD operations.

Rows are written only by the daily archival job; the archive read path lists
them back for the dashboard history view.
"""

import logging
from collections.abc import Sequence
from datetime import date

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from db.models import DailyStat

logger = logging.getLogger(__name__)


async def find_daily_stat(
    session: AsyncSession,
    stat_date: date,
    content_id: int | None = None,
) -> DailyStat | None:
    """Get the row for ``(stat_date, content_id)``; ``None`` content means site-wide."""
    query = select(DailyStat).where(DailyStat.stat_date == stat_date)
    if content_id is None:
        query = query.where(DailyStat.content_id.is_(None))
    else:
        query = query.where(DailyStat.content_id == content_id)

    result = await session.exec(query)
    return result.first()


async def upsert_daily_stat(session: AsyncSession, stat: DailyStat) -> DailyStat:
    """Insert or update a daily row. The caller commits."""
    session.add(stat)
    await session.flush()
    await session.refresh(stat)
    return stat


async def list_daily_stats(
    session: AsyncSession,
    start_date: date,
    end_date: date,
    content_id: int | None = None,
    include_content_rows: bool = False,
) -> Sequence[DailyStat]:
    """List archived rows between two dates (inclusive), oldest first.

    By default only site-wide rows are returned. Passing ``content_id`` narrows
    to that content item; ``include_content_rows`` returns every row.
    """
    query = select(DailyStat).where(
        DailyStat.stat_date >= start_date,
        DailyStat.stat_date <= end_date,
    )
    if content_id is not None:
        query = query.where(DailyStat.content_id == content_id)
    elif not include_content_rows:
        query = query.where(DailyStat.content_id.is_(None))

    query = query.order_by(DailyStat.stat_date, DailyStat.content_id)
    result = await session.exec(query)
    return result.all()
