"""
Database models using SQLAlchemy.
One row per estimate holding its folded engagement profile.
"""

from sqlalchemy import (
    Boolean, Column, DateTime, Float, Integer,
    String, Index
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class EngagementProfileRecord(Base):
    """Folded engagement profile for one estimate."""

    __tablename__ = "engagement_profiles"

    estimate_id = Column(String(100), primary_key=True)

    # Max-folded measurements
    time_on_results_seconds = Column(Integer, nullable=False, default=0)
    max_scroll_depth_percent = Column(Float, nullable=False, default=0.0)

    # Set-once flags
    estimate_completed = Column(Boolean, nullable=False, default=False)
    viewed_comparison = Column(Boolean, nullable=False, default=False)
    viewed_financing = Column(Boolean, nullable=False, default=False)
    viewed_next_steps = Column(Boolean, nullable=False, default=False)
    saved = Column(Boolean, nullable=False, default=False)
    shared = Column(Boolean, nullable=False, default=False)
    selected_tier = Column(Boolean, nullable=False, default=False)

    # Counter
    tier_toggle_count = Column(Integer, nullable=False, default=0)

    # Detail fields
    selected_tier_id = Column(String(20), nullable=True)  # good, better, best
    selected_tier_at = Column(DateTime(timezone=True), nullable=True)
    results_page_load_ms = Column(Float, nullable=True)
    results_page_first_viewed_at = Column(DateTime(timezone=True), nullable=True)
    results_page_last_viewed_at = Column(DateTime(timezone=True), nullable=True)
    estimate_completed_at = Column(DateTime(timezone=True), nullable=True)
    viewed_comparison_at = Column(DateTime(timezone=True), nullable=True)
    viewed_financing_at = Column(DateTime(timezone=True), nullable=True)
    viewed_next_steps_at = Column(DateTime(timezone=True), nullable=True)
    saved_at = Column(DateTime(timezone=True), nullable=True)
    shared_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_updated_at = Column(DateTime(timezone=True), nullable=False)

    # Indexes
    __table_args__ = (
        Index('idx_engagement_profile_updated', 'last_updated_at'),
        Index('idx_engagement_profile_completed', 'estimate_completed'),
    )
