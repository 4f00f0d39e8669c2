"""
Pydantic schemas for API requests and responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Event Schemas

class EventAck(BaseModel):
    """Acknowledgement returned for every ingestion request."""

    success: bool = Field(default=True, description="Always true; ingestion outcome is not surfaced")


# Profile Schemas

class EngagementProfileResponse(BaseModel):
    """Schema for an engagement profile."""

    model_config = ConfigDict(from_attributes=True)

    estimate_id: str
    time_on_results_seconds: int
    max_scroll_depth_percent: float
    estimate_completed: bool
    viewed_comparison: bool
    viewed_financing: bool
    viewed_next_steps: bool
    saved: bool
    shared: bool
    selected_tier: bool
    tier_toggle_count: int
    selected_tier_id: Optional[str] = None
    selected_tier_at: Optional[datetime] = None
    results_page_load_ms: Optional[float] = None
    results_page_first_viewed_at: Optional[datetime] = None
    results_page_last_viewed_at: Optional[datetime] = None
    estimate_completed_at: Optional[datetime] = None
    viewed_comparison_at: Optional[datetime] = None
    viewed_financing_at: Optional[datetime] = None
    viewed_next_steps_at: Optional[datetime] = None
    saved_at: Optional[datetime] = None
    shared_at: Optional[datetime] = None
    created_at: datetime
    last_updated_at: datetime


class ReadinessMetadata(BaseModel):
    """Dashboard guidance attached to a readiness tier."""

    expected_timeline: str
    recommended_action: str


class LeadSignalsResponse(BaseModel):
    """Schema for one estimate's engagement signals."""

    estimate_id: str
    profile: Optional[EngagementProfileResponse] = Field(
        None,
        description="Null when no events have been recorded for the estimate"
    )
    indicators: List[str] = Field(default_factory=list, description="Quality indicators in display order")
    readiness_tier: str = Field(..., description="Exploring options | Actively planning | Ready for on-site evaluation")
    readiness_metadata: ReadinessMetadata


class LeadSignalsListResponse(BaseModel):
    """Schema for a batch of lead signals, most ready first."""

    items: List[LeadSignalsResponse]
    total: int


# Gate Schemas

class GateDecisionResponse(BaseModel):
    """Schema for an engagement gate decision."""

    model_config = ConfigDict(from_attributes=True)

    estimate_id: str
    action: str
    allowed: bool
    reason_if_blocked: Optional[str] = None
    hint_target_section: Optional[str] = Field(
        None,
        description="Section the UI should scroll to and expand when blocked"
    )
