"""
Database CRUD operations package.

Usage:
    from db import crud
    stat = await crud.find_daily_stat(session, date(2024, 5, 1))
    summaries = await crud.resolve_content_summaries(session, {1, 2})
"""

from db.crud.content import (
    bump_lifetime_view_count,
    count_pending_moderation,
    count_published,
    resolve_content_summaries,
)
from db.crud.stats import (
    find_daily_stat,
    list_daily_stats,
    upsert_daily_stat,
)

__all__ = [
    "bump_lifetime_view_count",
    "count_pending_moderation",
    "count_published",
    "resolve_content_summaries",
    "find_daily_stat",
    "list_daily_stats",
    "upsert_daily_stat",
]
