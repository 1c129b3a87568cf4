"""create_analytics_tables

Revision ID: 3f9c1a7d2b40
Revises:
Create Date: 2026-10-19 09:12:44.120391

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel.sql.sqltypes

# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


content_status = sa.Enum('DRAFT', 'PUBLISHED', 'ARCHIVED', name='contentstatus')
comment_status = sa.Enum('PENDING', 'APPROVED', 'REJECTED', name='commentstatus')


def upgrade() -> None:
    op.create_table(
        'content',
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('slug', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('status', content_status, nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_content_slug'), 'content', ['slug'], unique=True)
    op.create_index(op.f('ix_content_status'), 'content', ['status'], unique=False)
    op.create_index(
        'idx_content_published', 'content', ['status'], unique=False,
        postgresql_where=sa.text('deleted_at IS NULL'),
    )

    op.create_table(
        'comment',
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('content_id', sa.Integer(), nullable=False),
        sa.Column('status', comment_status, nullable=False),
        sa.ForeignKeyConstraint(['content_id'], ['content.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_comment_content_id'), 'comment', ['content_id'], unique=False)
    op.create_index(op.f('ix_comment_status'), 'comment', ['status'], unique=False)

    op.create_table(
        'daily_stats',
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('stat_date', sa.Date(), nullable=False),
        sa.Column('content_id', sa.Integer(), nullable=True),
        sa.Column('page_views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('unique_visitors', sa.Integer(), nullable=False, server_default='0'),
        sa.CheckConstraint('page_views >= 0', name='ck_daily_stats_page_views'),
        sa.CheckConstraint('unique_visitors >= 0', name='ck_daily_stats_unique_visitors'),
        sa.ForeignKeyConstraint(['content_id'], ['content.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('stat_date', 'content_id', name='uk_daily_stats_date_content'),
    )
    op.create_index(op.f('ix_daily_stats_stat_date'), 'daily_stats', ['stat_date'], unique=False)
    op.create_index(op.f('ix_daily_stats_content_id'), 'daily_stats', ['content_id'], unique=False)
    # NULL content_id is never equal to itself, so the site-wide row needs its own index
    op.create_index(
        'uk_daily_stats_site_wide_date', 'daily_stats', ['stat_date'], unique=True,
        postgresql_where=sa.text('content_id IS NULL'),
    )


def downgrade() -> None:
    op.drop_index('uk_daily_stats_site_wide_date', table_name='daily_stats')
    op.drop_index(op.f('ix_daily_stats_content_id'), table_name='daily_stats')
    op.drop_index(op.f('ix_daily_stats_stat_date'), table_name='daily_stats')
    op.drop_table('daily_stats')

    op.drop_index(op.f('ix_comment_status'), table_name='comment')
    op.drop_index(op.f('ix_comment_content_id'), table_name='comment')
    op.drop_table('comment')

    op.drop_index('idx_content_published', table_name='content')
    op.drop_index(op.f('ix_content_status'), table_name='content')
    op.drop_index(op.f('ix_content_slug'), table_name='content')
    op.drop_table('content')

    comment_status.drop(op.get_bind(), checkfirst=True)
    content_status.drop(op.get_bind(), checkfirst=True)
