"""
Content collaborator operations used by the analytics core.

Covers the exact lifetime view counter and the lookups the dashboard needs:
batch title/slug resolution for the leaderboard and the two pass-through
counts.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import func
from sqlalchemy import update as sa_update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from db.enums import CommentStatus, ContentStatus
from db.models import Comment, Content
from db.schemas import ContentSummary

logger = logging.getLogger(__name__)


async def bump_lifetime_view_count(
    session: AsyncSession,
    content_id: int,
    delta: int = 1,
) -> bool:
    """Atomically add ``delta`` to a content item's lifetime view counter.

    Returns False when the content no longer exists. The caller commits.
    """
    result = await session.exec(
        sa_update(Content)
        .where(Content.id == content_id)
        .values(view_count=Content.view_count + delta)
    )
    await session.flush()
    return result.rowcount > 0


async def resolve_content_summaries(
    session: AsyncSession,
    ids: Iterable[int],
) -> dict[int, ContentSummary]:
    """Map content ids to display summaries, skipping missing or deleted items."""
    id_set = set(ids)
    if not id_set:
        return {}

    query = select(Content.id, Content.title, Content.slug, Content.view_count).where(
        Content.id.in_(id_set),
        Content.deleted_at.is_(None),
    )
    result = await session.exec(query)
    return {
        row.id: ContentSummary(
            id=row.id, title=row.title, slug=row.slug, view_count=row.view_count or 0
        )
        for row in result.all()
    }


async def count_published(session: AsyncSession) -> int:
    query = select(func.count(Content.id)).where(
        Content.status == ContentStatus.PUBLISHED,
        Content.deleted_at.is_(None),
    )
    result = await session.exec(query)
    return result.first() or 0


async def count_pending_moderation(session: AsyncSession) -> int:
    query = select(func.count(Comment.id)).where(Comment.status == CommentStatus.PENDING)
    result = await session.exec(query)
    return result.first() or 0
