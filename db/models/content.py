"""Content and comment tables.

Only the columns the analytics core reads or bumps are modelled here; editing
and moderation workflows live in the surrounding application.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, text
from sqlmodel import Field

from db.enums import CommentStatus, ContentStatus
from db.models.base import TimestampMixin


class Content(TimestampMixin, table=True):
    __tablename__ = "content"
    __table_args__ = (
        Index(
            "idx_content_published",
            "status",
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    id: int = Field(default=None, primary_key=True)
    title: str
    slug: str = Field(unique=True, index=True)
    status: ContentStatus = Field(default=ContentStatus.DRAFT, index=True)
    # Exact lifetime view counter, bumped once per recorded view
    view_count: int = Field(default=0, nullable=False)
    deleted_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))


class Comment(TimestampMixin, table=True):
    __tablename__ = "comment"

    id: int = Field(default=None, primary_key=True)
    content_id: int = Field(foreign_key="content.id", index=True, ondelete="CASCADE")
    status: CommentStatus = Field(default=CommentStatus.PENDING, index=True)
