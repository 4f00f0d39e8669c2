"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create engagement_profiles table
    op.create_table(
        'engagement_profiles',
        sa.Column('estimate_id', sa.String(length=100), nullable=False),
        sa.Column('time_on_results_seconds', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_scroll_depth_percent', sa.Float(), nullable=False, server_default='0'),
        sa.Column('estimate_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('viewed_comparison', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('viewed_financing', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('viewed_next_steps', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('saved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('shared', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('selected_tier', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('tier_toggle_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('selected_tier_id', sa.String(length=20), nullable=True),
        sa.Column('selected_tier_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('results_page_load_ms', sa.Float(), nullable=True),
        sa.Column('results_page_first_viewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('results_page_last_viewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('estimate_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('viewed_comparison_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('viewed_financing_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('viewed_next_steps_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('saved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('shared_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('estimate_id')
    )
    op.create_index('idx_engagement_profile_updated', 'engagement_profiles', ['last_updated_at'], unique=False)
    op.create_index('idx_engagement_profile_completed', 'engagement_profiles', ['estimate_completed'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_engagement_profile_completed', table_name='engagement_profiles')
    op.drop_index('idx_engagement_profile_updated', table_name='engagement_profiles')
    op.drop_table('engagement_profiles')
