"""
State models for Leadlens engagement profiles and gate decisions.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class EngagementProfile:
    """Running engagement summary for one estimate."""

    estimate_id: str

    # Max-folded measurements
    time_on_results_seconds: int = 0
    max_scroll_depth_percent: float = 0.0

    # Set-once flags
    estimate_completed: bool = False
    viewed_comparison: bool = False
    viewed_financing: bool = False
    viewed_next_steps: bool = False
    saved: bool = False
    shared: bool = False
    selected_tier: bool = False

    # Counter (informational only, tolerates duplicate delivery)
    tier_toggle_count: int = 0

    # Detail fields
    selected_tier_id: Optional[str] = None  # good, better, best
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

    # Timestamps
    created_at: datetime = field(default_factory=utc_now)
    last_updated_at: datetime = field(default_factory=utc_now)

    def copy(self) -> "EngagementProfile":
        """Return a detached copy of this profile."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "estimate_id": self.estimate_id,
            "time_on_results_seconds": self.time_on_results_seconds,
            "max_scroll_depth_percent": self.max_scroll_depth_percent,
            "estimate_completed": self.estimate_completed,
            "viewed_comparison": self.viewed_comparison,
            "viewed_financing": self.viewed_financing,
            "viewed_next_steps": self.viewed_next_steps,
            "saved": self.saved,
            "shared": self.shared,
            "selected_tier": self.selected_tier,
            "tier_toggle_count": self.tier_toggle_count,
            "selected_tier_id": self.selected_tier_id,
            "results_page_load_ms": self.results_page_load_ms,
            "results_page_first_viewed_at": _isoformat(self.results_page_first_viewed_at),
            "results_page_last_viewed_at": _isoformat(self.results_page_last_viewed_at),
            "selected_tier_at": _isoformat(self.selected_tier_at),
            "estimate_completed_at": _isoformat(self.estimate_completed_at),
            "viewed_comparison_at": _isoformat(self.viewed_comparison_at),
            "viewed_financing_at": _isoformat(self.viewed_financing_at),
            "viewed_next_steps_at": _isoformat(self.viewed_next_steps_at),
            "saved_at": _isoformat(self.saved_at),
            "shared_at": _isoformat(self.shared_at),
            "created_at": _isoformat(self.created_at),
            "last_updated_at": _isoformat(self.last_updated_at),
        }


@dataclass(frozen=True)
class GateDecision:
    """Outcome of an engagement gate check. Never cached."""

    allowed: bool
    reason_if_blocked: Optional[str] = None
    hint_target_section: Optional[str] = None


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
