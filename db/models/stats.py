"""Durable daily statistics."""

from datetime import date

from sqlalchemy import CheckConstraint, Index, UniqueConstraint, text
from sqlmodel import Field

from db.models.base import TimestampMixin


class DailyStat(TimestampMixin, table=True):
    """Exact page views and unique visitors for one day.

    ``content_id`` of ``None`` is the site-wide row. A plain unique constraint
    treats NULLs as distinct, so the site-wide row gets its own partial index.
    """

    __tablename__ = "daily_stats"
    __table_args__ = (
        UniqueConstraint("stat_date", "content_id", name="uk_daily_stats_date_content"),
        Index(
            "uk_daily_stats_site_wide_date",
            "stat_date",
            unique=True,
            postgresql_where=text("content_id IS NULL"),
            sqlite_where=text("content_id IS NULL"),
        ),
        CheckConstraint("page_views >= 0", name="ck_daily_stats_page_views"),
        CheckConstraint("unique_visitors >= 0", name="ck_daily_stats_unique_visitors"),
    )

    id: int = Field(default=None, primary_key=True)
    stat_date: date = Field(index=True)
    content_id: int | None = Field(
        default=None, foreign_key="content.id", index=True, ondelete="CASCADE"
    )
    page_views: int = Field(default=0, nullable=False)
    unique_visitors: int = Field(default=0, nullable=False)
