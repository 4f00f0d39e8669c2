"""
Readiness tier classification.
"""

from enum import Enum
from typing import List, Optional

from core.state import EngagementProfile
from modules.engagement.indicators import QualityIndicator


class ReadinessTier(str, Enum):
    """Ordered readiness tiers, least to most ready."""

    EXPLORING = "Exploring options"
    ACTIVELY_PLANNING = "Actively planning"
    READY_FOR_ONSITE = "Ready for on-site evaluation"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)

    def at_least(self, other: "ReadinessTier") -> bool:
        return self.rank >= other.rank


_TIER_ORDER = [
    ReadinessTier.EXPLORING,
    ReadinessTier.ACTIVELY_PLANNING,
    ReadinessTier.READY_FOR_ONSITE,
]

READY_MIN_SECONDS = 90
READY_MIN_TOGGLES = 2
PLANNING_MIN_SECONDS = 30


def is_ready_for_onsite(profile: EngagementProfile) -> bool:
    return (
        profile.estimate_completed
        and (profile.viewed_next_steps or profile.tier_toggle_count >= READY_MIN_TOGGLES)
        and profile.time_on_results_seconds >= READY_MIN_SECONDS
    )


def is_actively_planning(profile: EngagementProfile) -> bool:
    return (
        profile.estimate_completed
        and (profile.viewed_comparison or profile.viewed_financing)
        and profile.time_on_results_seconds >= PLANNING_MIN_SECONDS
    )


def classify(
    profile: Optional[EngagementProfile],
    indicators: Optional[List[QualityIndicator]] = None
) -> ReadinessTier:
    """
    Classify a profile into exactly one readiness tier.

    Rules are checked most-ready first and the first match wins, so a
    profile can never satisfy two tiers. ``indicators`` is accepted so
    callers can pass what they already derived; the rules read the
    profile's documented thresholds directly.

    Args:
        profile: Engagement profile (None is treated as no engagement)
        indicators: Previously derived indicators (optional)

    Returns:
        Readiness tier, ``EXPLORING`` when nothing else matches
    """
    if profile is None:
        return ReadinessTier.EXPLORING

    if is_ready_for_onsite(profile):
        return ReadinessTier.READY_FOR_ONSITE
    if is_actively_planning(profile):
        return ReadinessTier.ACTIVELY_PLANNING
    return ReadinessTier.EXPLORING
