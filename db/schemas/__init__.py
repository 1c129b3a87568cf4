"""Pydantic schemas package."""

from db.schemas.analytics import (
    ArchivalResult,
    ContentSummary,
    DailyStatData,
    HotPost,
    OverviewSnapshot,
)

__all__ = [
    "ArchivalResult",
    "ContentSummary",
    "DailyStatData",
    "HotPost",
    "OverviewSnapshot",
]
