"""
Dashboard overview assembly.

Combines today's transient counters and the leaderboard head from Redis with
published/pending counts from the database. Counters that cannot be read or
parsed show as 0; leaderboard entries whose content is gone are dropped.
"""

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from analytics import keys
from db import crud
from db.config import settings
from db.redis_database import REDIS_ASYNC_CLIENT
from db.schemas import HotPost, OverviewSnapshot

logger = logging.getLogger(__name__)


async def get_hot_posts(session: AsyncSession, limit: int | None = None) -> list[HotPost]:
    """Top leaderboard entries by score, highest first, resolved to content."""
    limit = limit or settings.analytics_overview_top_n
    entries = await REDIS_ASYNC_CLIENT.zrevrange(
        keys.ranking_key(), 0, limit - 1, withscores=True
    )
    if not entries:
        return []

    ranked: list[tuple[int, int]] = []
    for member, score in entries:
        content_id = keys.parse_member_id(member)
        if content_id is None:
            logger.warning(f"Ignoring malformed leaderboard member {member!r}")
            continue
        ranked.append((content_id, int(score or 0)))

    summaries = await crud.resolve_content_summaries(
        session, [content_id for content_id, _ in ranked]
    )

    hot_posts = []
    for content_id, score in ranked:
        summary = summaries.get(content_id)
        if summary is None:
            continue
        hot_posts.append(
            HotPost(
                post_id=content_id,
                title=summary.title,
                slug=summary.slug,
                view_count=summary.view_count,
                score=score,
            )
        )
    return hot_posts


async def get_overview(session: AsyncSession) -> OverviewSnapshot:
    day = keys.today()

    today_pv = keys.parse_counter(await REDIS_ASYNC_CLIENT.get(keys.page_view_key(day)))
    today_uv = int(await REDIS_ASYNC_CLIENT.pfcount(keys.unique_visitor_key(day)) or 0)

    return OverviewSnapshot(
        today_pv=today_pv,
        today_uv=today_uv,
        published_posts=await crud.count_published(session),
        pending_comments=await crud.count_pending_moderation(session),
        hot_posts=await get_hot_posts(session),
    )
