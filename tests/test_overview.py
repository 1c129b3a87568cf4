"""
Tests for analytics/overview.py

Covers:
- Zero snapshot with no traffic
- Today's totals and the resolved leaderboard after a few views
- Missing, deleted and malformed leaderboard entries dropped
- Corrupt counters read as 0
- Leaderboard head limited to the configured size, scores truncated to int
- Published and pending-moderation counts passed through
"""

import pytest

from analytics.overview import get_hot_posts, get_overview
from analytics.recorder import record_view
from db.config import settings
from db.enums import CommentStatus, ContentStatus

RANKING_KEY = "post:ranking:views"


class TestEmptyOverview:
    @pytest.mark.asyncio
    async def test_no_traffic(self, fake_redis, session, frozen_day):
        snapshot = await get_overview(session)

        assert snapshot.today_pv == 0
        assert snapshot.today_uv == 0
        assert snapshot.published_posts == 0
        assert snapshot.pending_comments == 0
        assert snapshot.hot_posts == []


class TestTodayTotals:
    @pytest.mark.asyncio
    async def test_views_from_three_visitors(
        self, fake_redis, session, frozen_day, enqueue_mock, make_content
    ):
        post_a = await make_content("Post A")
        post_b = await make_content("Post B")

        await record_view(post_a.id, "ip:1.1.1.1", frozen_day)
        await record_view(post_a.id, "ip:1.1.1.1", frozen_day)
        await record_view(post_a.id, "ip:2.2.2.2", frozen_day)
        await record_view(post_b.id, "ip:3.3.3.3", frozen_day)

        snapshot = await get_overview(session)

        assert snapshot.today_pv == 4
        assert snapshot.today_uv == 3
        assert [(p.post_id, p.score) for p in snapshot.hot_posts] == [
            (post_a.id, 3),
            (post_b.id, 1),
        ]
        assert snapshot.hot_posts[0].title == "Post A"
        assert snapshot.hot_posts[0].slug == "post-a"

    @pytest.mark.asyncio
    async def test_corrupt_page_view_counter_reads_zero(self, fake_redis, session, frozen_day):
        await fake_redis.set(f"pv:daily:{frozen_day.isoformat()}", "not-a-number")

        snapshot = await get_overview(session)

        assert snapshot.today_pv == 0

    @pytest.mark.asyncio
    async def test_lifetime_view_count_comes_from_content(
        self, fake_redis, session, frozen_day, make_content
    ):
        post = await make_content("Evergreen", view_count=1200)
        await fake_redis.zadd(RANKING_KEY, {str(post.id): 8})

        snapshot = await get_overview(session)

        assert snapshot.hot_posts[0].view_count == 1200
        assert snapshot.hot_posts[0].score == 8


class TestHotPosts:
    @pytest.mark.asyncio
    async def test_missing_and_deleted_content_dropped(
        self, fake_redis, session, make_content
    ):
        kept = await make_content("Kept")
        deleted = await make_content("Removed", deleted=True)
        await fake_redis.zadd(
            RANKING_KEY,
            {"999": 50, str(deleted.id): 40, str(kept.id): 2, "not-an-id": 30},
        )

        hot_posts = await get_hot_posts(session)

        assert [p.post_id for p in hot_posts] == [kept.id]

    @pytest.mark.asyncio
    async def test_limited_to_top_n_highest_first(self, fake_redis, session, make_content):
        posts = [await make_content(f"Post {i}") for i in range(7)]
        await fake_redis.zadd(RANKING_KEY, {str(p.id): i + 1 for i, p in enumerate(posts)})

        hot_posts = await get_hot_posts(session)

        assert len(hot_posts) == settings.analytics_overview_top_n == 5
        assert [p.score for p in hot_posts] == [7, 6, 5, 4, 3]

    @pytest.mark.asyncio
    async def test_fractional_score_truncated(self, fake_redis, session, make_content):
        post = await make_content("Fractional")
        await fake_redis.zadd(RANKING_KEY, {str(post.id): 2.9})

        hot_posts = await get_hot_posts(session)

        assert [(p.post_id, p.score) for p in hot_posts] == [(post.id, 2)]
        assert isinstance(hot_posts[0].score, int)

    @pytest.mark.asyncio
    async def test_empty_leaderboard(self, fake_redis, session):
        assert await get_hot_posts(session) == []


class TestCollaboratorCounts:
    @pytest.mark.asyncio
    async def test_published_and_pending_counts(
        self, fake_redis, session, frozen_day, make_content, make_comment
    ):
        live = await make_content("Live")
        await make_content("Also Live")
        await make_content("Draft", status=ContentStatus.DRAFT)
        await make_content("Gone", deleted=True)
        await make_comment(live)
        await make_comment(live)
        await make_comment(live, CommentStatus.APPROVED)

        snapshot = await get_overview(session)

        assert snapshot.published_posts == 2
        assert snapshot.pending_comments == 2


class TestSerialization:
    @pytest.mark.asyncio
    async def test_dashboard_field_names(self, fake_redis, session, frozen_day, make_content):
        post = await make_content("Post")
        await fake_redis.zadd(RANKING_KEY, {str(post.id): 1})

        payload = (await get_overview(session)).model_dump(by_alias=True)

        assert set(payload) == {"todayPv", "todayUv", "publishedPosts", "pendingComments", "hotPosts"}
        assert set(payload["hotPosts"][0]) == {"postId", "title", "slug", "viewCount", "score"}
