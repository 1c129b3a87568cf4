"""
View event recorder.

Each view updates four counters, in order, every step best effort:

1. the day's page-view counter (INCR, then refresh its TTL)
2. the day's unique-visitor HyperLogLog (PFADD, then refresh its TTL)
3. the leaderboard score of the content item (ZINCRBY)
4. the exact lifetime counter on the content row, via a background actor

A failure in one step is logged and the remaining steps still run, so a
Redis outage never breaks the request that triggered the view.
"""

import logging
from datetime import date

from fastapi.requests import Request

from analytics import keys
from analytics.tasks import increment_content_view_count
from db.config import settings
from db.redis_database import REDIS_ASYNC_CLIENT
from utils.network import get_client_ip

logger = logging.getLogger(__name__)


async def record_view(
    content_id: int | None,
    visitor_identity: str | None,
    event_date: date | None = None,
) -> None:
    """Count one view of ``content_id`` by ``visitor_identity``. Never raises."""
    if content_id is None:
        return

    day = event_date or keys.today()
    identity = visitor_identity or f"ip:{keys.UNKNOWN_ADDRESS}"
    ttl = settings.analytics_daily_key_ttl

    pv_key = keys.page_view_key(day)
    if await REDIS_ASYNC_CLIENT.incr(pv_key):
        await REDIS_ASYNC_CLIENT.expire(pv_key, ttl)
    else:
        logger.warning(f"Failed to count page view for content {content_id} on {day}")

    uv_key = keys.unique_visitor_key(day)
    await REDIS_ASYNC_CLIENT.pfadd(uv_key, identity)
    await REDIS_ASYNC_CLIENT.expire(uv_key, ttl)

    score = await REDIS_ASYNC_CLIENT.zincrby(keys.ranking_key(), 1, str(content_id))
    if score is None:
        logger.warning(f"Failed to bump leaderboard score for content {content_id}")

    try:
        increment_content_view_count.send(content_id, 1)
    except Exception as e:
        logger.error(f"Failed to enqueue lifetime view count for content {content_id}: {e}")


async def record_request_view(
    request: Request,
    content_id: int | None,
    user_id: int | str | None = None,
) -> None:
    """Record a view for an HTTP request, deriving the visitor identity from it."""
    day = keys.today()
    identity = keys.visitor_identity(user_id, get_client_ip(request), day)
    await record_view(content_id, identity, day)
