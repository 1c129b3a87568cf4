"""
Tests for the analytics collaborators in db/crud

Covers:
- Lifetime view counter bumps
- Content summary resolution
- Daily stat lookup, upsert and listing
- One site-wide row per day
"""

from datetime import date, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from db import crud
from db.models import DailyStat

DAY = date(2026, 3, 13)


class TestLifetimeViewCount:
    @pytest.mark.asyncio
    async def test_bump_adds_delta(self, session, make_content):
        post = await make_content("Post", view_count=41)

        assert await crud.bump_lifetime_view_count(session, post.id) is True
        assert await crud.bump_lifetime_view_count(session, post.id, 3) is True
        await session.commit()

        await session.refresh(post)
        assert post.view_count == 45

    @pytest.mark.asyncio
    async def test_missing_content(self, session):
        assert await crud.bump_lifetime_view_count(session, 404) is False


class TestContentSummaries:
    @pytest.mark.asyncio
    async def test_resolves_existing_content_only(self, session, make_content):
        live = await make_content("Live Post", view_count=9)
        gone = await make_content("Gone Post", deleted=True)

        summaries = await crud.resolve_content_summaries(session, [live.id, gone.id, 999])

        assert list(summaries) == [live.id]
        assert summaries[live.id].slug == "live-post"
        assert summaries[live.id].view_count == 9

    @pytest.mark.asyncio
    async def test_no_ids(self, session):
        assert await crud.resolve_content_summaries(session, []) == {}


class TestDailyStats:
    @pytest.mark.asyncio
    async def test_site_wide_and_content_rows_are_distinct(self, session, make_content):
        post = await make_content("Post")
        await crud.upsert_daily_stat(session, DailyStat(stat_date=DAY, page_views=10, unique_visitors=4))
        await crud.upsert_daily_stat(
            session, DailyStat(stat_date=DAY, content_id=post.id, page_views=3, unique_visitors=2)
        )
        await session.commit()

        site_wide = await crud.find_daily_stat(session, DAY)
        per_content = await crud.find_daily_stat(session, DAY, post.id)

        assert (site_wide.content_id, site_wide.page_views) == (None, 10)
        assert (per_content.content_id, per_content.page_views) == (post.id, 3)

    @pytest.mark.asyncio
    async def test_one_site_wide_row_per_day(self, session):
        await crud.upsert_daily_stat(session, DailyStat(stat_date=DAY, page_views=1, unique_visitors=1))
        await session.commit()

        with pytest.raises(IntegrityError):
            await crud.upsert_daily_stat(session, DailyStat(stat_date=DAY, page_views=2, unique_visitors=2))
        await session.rollback()

    @pytest.mark.asyncio
    async def test_upsert_updates_existing_row(self, session):
        stat = await crud.upsert_daily_stat(session, DailyStat(stat_date=DAY, page_views=1, unique_visitors=1))
        stat.page_views = 7
        await crud.upsert_daily_stat(session, stat)
        await session.commit()

        rows = await crud.list_daily_stats(session, DAY, DAY)
        assert [(r.page_views, r.unique_visitors) for r in rows] == [(7, 1)]

    @pytest.mark.asyncio
    async def test_list_range_and_filters(self, session, make_content):
        post = await make_content("Post")
        for offset in range(3):
            await crud.upsert_daily_stat(
                session,
                DailyStat(stat_date=DAY - timedelta(days=offset), page_views=offset + 1, unique_visitors=1),
            )
        await crud.upsert_daily_stat(
            session, DailyStat(stat_date=DAY, content_id=post.id, page_views=5, unique_visitors=5)
        )
        await session.commit()

        site_wide = await crud.list_daily_stats(session, DAY - timedelta(days=1), DAY)
        everything = await crud.list_daily_stats(
            session, DAY - timedelta(days=2), DAY, include_content_rows=True
        )
        for_post = await crud.list_daily_stats(session, DAY - timedelta(days=2), DAY, content_id=post.id)

        assert [r.stat_date for r in site_wide] == [DAY - timedelta(days=1), DAY]
        assert len(everything) == 4
        assert [(r.content_id, r.page_views) for r in for_post] == [(post.id, 5)]
