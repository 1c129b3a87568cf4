"""
Scheduled rollup jobs.

``run_daily_archival`` moves the previous day's transient totals into a
durable ``daily_stats`` row and clears the Redis keys. ``run_hourly_trim``
bounds the leaderboard size. Both run under a non-blocking Redis lock so
that only one instance executes a given job at a time.

Unlike the recorder, these jobs let Redis errors propagate: reading
"Redis is down" as "zero views" would archive wrong totals.
"""

import logging
from datetime import date

from redis.exceptions import ResponseError, WatchError

from analytics import keys
from db import crud
from db.config import settings
from db.database import get_background_session
from db.models import DailyStat
from db.redis_database import REDIS_ASYNC_CLIENT
from db.schemas import ArchivalResult
from utils.const import ARCHIVAL_LOCK_KEY, TRIM_LOCK_KEY
from utils.lock import redis_lock

logger = logging.getLogger(__name__)


def _counter_or_zero(raw, key: str) -> int:
    if isinstance(raw, ResponseError):
        logger.warning(f"Unreadable counter at {key}, archiving as 0: {raw}")
        return 0
    return keys.parse_counter(raw)


async def _count_visitors(pipe, uv_key: str) -> int:
    try:
        return int(await pipe.pfcount(uv_key) or 0)
    except ResponseError as e:
        logger.warning(f"Unreadable visitor estimate at {uv_key}, archiving as 0: {e}")
        return 0


async def _write_site_wide_row(stat_date: date, page_views: int, unique_visitors: int):
    """Create or overwrite the site-wide row for ``stat_date`` and commit it."""
    async with get_background_session() as session:
        stat = await crud.find_daily_stat(session, stat_date)
        if stat is None:
            stat = DailyStat(stat_date=stat_date, content_id=None)
        stat.page_views = keys.clamp_to_int32(page_views)
        stat.unique_visitors = keys.clamp_to_int32(unique_visitors)
        await crud.upsert_daily_stat(session, stat)
        await session.commit()


async def _archive_plain(stat_date: date) -> ArchivalResult:
    pv_key = keys.page_view_key(stat_date)
    uv_key = keys.unique_visitor_key(stat_date)

    async with REDIS_ASYNC_CLIENT.pipeline(transaction=False) as pipe:
        pipe.get(pv_key)
        pipe.pfcount(uv_key)
        pv_raw, uv_raw = await pipe.execute(raise_on_error=False)

    result = ArchivalResult(
        stat_date=stat_date,
        page_views=_counter_or_zero(pv_raw, pv_key),
        unique_visitors=0 if isinstance(uv_raw, ResponseError) else int(uv_raw or 0),
    )
    if result.page_views or result.unique_visitors:
        await _write_site_wide_row(stat_date, result.page_views, result.unique_visitors)
        result.written = True

    await REDIS_ASYNC_CLIENT.client.delete(pv_key, uv_key)
    result.keys_cleared = True
    return result


async def _archive_watched(stat_date: date) -> ArchivalResult:
    """Archive under WATCH so views landing mid-run are never deleted unread.

    The durable row is committed before the keys are deleted. If either key
    changes in between, the delete aborts and the run starts over, which
    overwrites the row with the newer totals.
    """
    pv_key = keys.page_view_key(stat_date)
    uv_key = keys.unique_visitor_key(stat_date)
    max_attempts = max(1, settings.analytics_archival_max_retries)
    result = ArchivalResult(stat_date=stat_date)

    async with REDIS_ASYNC_CLIENT.pipeline(transaction=True) as pipe:
        for attempt in range(1, max_attempts + 1):
            try:
                # PFCOUNT rewrites a stale cardinality cache, which counts as
                # a write to a watched key; refresh it before watching.
                await _count_visitors(REDIS_ASYNC_CLIENT.client, uv_key)
                await pipe.watch(pv_key, uv_key)
                page_views = keys.parse_counter(await pipe.get(pv_key))
                unique_visitors = await _count_visitors(pipe, uv_key)
                result = ArchivalResult(
                    stat_date=stat_date,
                    page_views=page_views,
                    unique_visitors=unique_visitors,
                )
                if page_views or unique_visitors:
                    await _write_site_wide_row(stat_date, page_views, unique_visitors)
                    result.written = True

                pipe.multi()
                pipe.delete(pv_key, uv_key)
                await pipe.execute()
                result.keys_cleared = True
                return result
            except WatchError:
                logger.info(
                    f"Counters for {stat_date} changed during archival, "
                    f"retrying ({attempt}/{max_attempts})"
                )

    logger.warning(
        f"Counters for {stat_date} kept changing after {max_attempts} attempts; "
        "leaving keys to expire"
    )
    return result


async def run_daily_archival(target_date: date | None = None) -> ArchivalResult:
    """Archive the site-wide totals of ``target_date`` (default: yesterday)."""
    stat_date = target_date or keys.yesterday()

    async with redis_lock(ARCHIVAL_LOCK_KEY, timeout=settings.analytics_job_lock_timeout) as acquired:
        if not acquired:
            logger.info(f"Daily archival for {stat_date} already running elsewhere, skipping")
            return ArchivalResult(stat_date=stat_date, skipped_reason="locked")

        if settings.analytics_archival_watch_keys:
            result = await _archive_watched(stat_date)
        else:
            result = await _archive_plain(stat_date)

    if result.written:
        logger.info(
            f"Archived {stat_date}: {result.page_views} page views, "
            f"{result.unique_visitors} unique visitors"
        )
    else:
        logger.info(f"No traffic recorded for {stat_date}, nothing archived")
    return result


async def run_hourly_trim() -> int:
    """Drop all but the top leaderboard entries. Returns how many were removed."""
    limit = settings.analytics_leaderboard_size
    ranking_key = keys.ranking_key()

    async with redis_lock(TRIM_LOCK_KEY, timeout=settings.analytics_job_lock_timeout) as acquired:
        if not acquired:
            logger.info("Leaderboard trim already running elsewhere, skipping")
            return 0

        size = await REDIS_ASYNC_CLIENT.client.zcard(ranking_key)
        if size <= limit:
            return 0
        # Negative rank keeps the top entries even if members are added meanwhile
        removed = await REDIS_ASYNC_CLIENT.client.zremrangebyrank(
            ranking_key, 0, -(limit + 1)
        )

    logger.info(f"Trimmed {removed} entries from the leaderboard (limit {limit})")
    return removed
