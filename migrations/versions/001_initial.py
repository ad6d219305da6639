"""Initial schema - stories, stats, rankings, locks

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-01 00:00:00.000000

Creates the story table read by the ranking jobs, the per-day stats and
ranking tables (both unique on story_id + date) and the advisory lock table.
Based on the SQLAlchemy models defined in database/models/.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _calendar_columns() -> list:
    return [
        sa.Column('day', sa.Integer, nullable=False),
        sa.Column('month', sa.Integer, nullable=False),
        sa.Column('year', sa.Integer, nullable=False),
        sa.Column('iso_week', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    ]


def upgrade() -> None:
    # ==================================================
    # STORIES
    # ==================================================

    op.create_table(
        'stories',
        sa.Column('id', sa.String(50), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('image', sa.Text, nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('categories', sa.JSON, nullable=True),
        sa.Column('author_name', sa.String(255), nullable=True),
        sa.Column('chapter_count', sa.Integer, default=0),
        sa.Column('views', sa.Integer, default=0),
        sa.Column('status', sa.String(20), default='draft'),
        sa.Column('approval_status', sa.String(20), default='pending'),
        sa.Column('stars', sa.Float, default=0.0),
        sa.Column('count_star', sa.Integer, default=0),
        sa.Column('is_full', sa.Boolean, default=False),
        sa.Column('is_hot', sa.Boolean, default=False),
        sa.Column('is_new', sa.Boolean, default=False),
        sa.Column('hot_day', sa.Boolean, default=False),
        sa.Column('hot_week', sa.Boolean, default=False),
        sa.Column('hot_month', sa.Boolean, default=False),
        sa.Column('hot_all_time', sa.Boolean, default=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_stories_eligibility', 'stories', ['status', 'approval_status'])

    # ==================================================
    # STORY STATS
    # ==================================================

    op.create_table(
        'story_stats',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('story_id', sa.String(50), sa.ForeignKey('stories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('views', sa.Integer, default=0),
        sa.Column('unique_views', sa.Integer, default=0),
        sa.Column('ratings_count', sa.Integer, default=0),
        sa.Column('ratings_sum', sa.Integer, default=0),
        sa.Column('comments_count', sa.Integer, default=0),
        sa.Column('bookmarks_count', sa.Integer, default=0),
        sa.Column('shares_count', sa.Integer, default=0),
        *_calendar_columns(),
        sa.UniqueConstraint('story_id', 'date', name='uq_story_stats_story_date'),
    )
    op.create_index('ix_story_stats_story_id', 'story_stats', ['story_id'])
    op.create_index('ix_story_stats_date', 'story_stats', ['date'])
    op.create_index('idx_story_stats_ymd', 'story_stats', ['year', 'month', 'day'])
    op.create_index('idx_story_stats_week', 'story_stats', ['year', 'iso_week'])
    op.create_index('idx_story_stats_month', 'story_stats', ['year', 'month'])

    # ==================================================
    # STORY RANKINGS
    # ==================================================

    op.create_table(
        'story_rankings',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('story_id', sa.String(50), sa.ForeignKey('stories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('daily_score', sa.Float, default=0.0),
        sa.Column('weekly_score', sa.Float, default=0.0),
        sa.Column('monthly_score', sa.Float, default=0.0),
        sa.Column('all_time_score', sa.Float, default=0.0),
        sa.Column('daily_rank', sa.Integer, default=0),
        sa.Column('weekly_rank', sa.Integer, default=0),
        sa.Column('monthly_rank', sa.Integer, default=0),
        sa.Column('all_time_rank', sa.Integer, default=0),
        *_calendar_columns(),
        sa.UniqueConstraint('story_id', 'date', name='uq_story_rankings_story_date'),
    )
    op.create_index('ix_story_rankings_story_id', 'story_rankings', ['story_id'])
    op.create_index('ix_story_rankings_date', 'story_rankings', ['date'])
    for rank_column in ('daily_rank', 'weekly_rank', 'monthly_rank', 'all_time_rank'):
        op.create_index(f'ix_story_rankings_{rank_column}', 'story_rankings', [rank_column])
    op.create_index('idx_story_rankings_ymd', 'story_rankings', ['year', 'month', 'day'])
    op.create_index('idx_story_rankings_week', 'story_rankings', ['year', 'iso_week'])
    op.create_index('idx_story_rankings_month', 'story_rankings', ['year', 'month'])

    # ==================================================
    # RANKING LOCKS
    # ==================================================

    op.create_table(
        'ranking_locks',
        sa.Column('horizon', sa.String(20), primary_key=True),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('acquired_at', sa.DateTime, nullable=True),
        sa.Column('expires_at', sa.DateTime, nullable=False),
    )


def downgrade() -> None:
    op.drop_table('ranking_locks')
    op.drop_table('story_rankings')
    op.drop_table('story_stats')
    op.drop_table('stories')
