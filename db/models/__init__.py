"""
Database models package.

    from db.models import Content, Comment, DailyStat
"""

from db.models.base import TimestampMixin
from db.models.content import Comment, Content
from db.models.stats import DailyStat

__all__ = [
    "TimestampMixin",
    "Content",
    "Comment",
    "DailyStat",
]
