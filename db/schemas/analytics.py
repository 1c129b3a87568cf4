"""Analytics read-model schemas."""

from datetime import date

from pydantic import BaseModel, Field


class ContentSummary(BaseModel):
    """Display data for one content item, resolved from the content table."""

    id: int
    title: str
    slug: str
    view_count: int = 0


class HotPost(BaseModel):
    """One leaderboard entry as shown on the dashboard."""

    post_id: int = Field(alias="postId")
    title: str
    slug: str
    view_count: int | None = Field(default=None, alias="viewCount")
    score: int = 0

    class Config:
        populate_by_name = True


class OverviewSnapshot(BaseModel):
    """Today's transient totals plus the resolved top-N leaderboard."""

    today_pv: int = Field(default=0, alias="todayPv")
    today_uv: int = Field(default=0, alias="todayUv")
    published_posts: int = Field(default=0, alias="publishedPosts")
    pending_comments: int = Field(default=0, alias="pendingComments")
    hot_posts: list[HotPost] = Field(default_factory=list, alias="hotPosts")

    class Config:
        populate_by_name = True


class DailyStatData(BaseModel):
    """One archived row; ``content_id`` is None for the site-wide total."""

    stat_date: date = Field(alias="statDate")
    content_id: int | None = Field(default=None, alias="contentId")
    page_views: int = Field(alias="pageViews")
    unique_visitors: int = Field(alias="uniqueVisitors")

    class Config:
        populate_by_name = True
        from_attributes = True


class ArchivalResult(BaseModel):
    """Outcome of one daily archival run, for logs and the admin API."""

    stat_date: date
    page_views: int = 0
    unique_visitors: int = 0
    written: bool = False
    keys_cleared: bool = False
    skipped_reason: str | None = None
