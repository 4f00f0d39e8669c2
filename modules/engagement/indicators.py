"""
Quality indicator rules.

Each indicator is a named predicate over an engagement profile. Indicators
are derived on every read and never stored, so tuning a threshold here
reclassifies existing profiles without a migration.
"""

from enum import Enum
from typing import Callable, List, Optional, Tuple

from core.state import EngagementProfile


class QualityIndicator(str, Enum):
    """Human-readable engagement labels, in display order."""

    HIGH_INTENT = "High intent"
    REVIEWED_OPTIONS = "Reviewed options"
    VIEWED_FINANCING = "Viewed financing"
    SAVED_OR_SHARED = "Saved/shared estimate"


HIGH_INTENT_MIN_SECONDS = 60
REVIEWED_OPTIONS_MIN_TOGGLES = 1


def is_high_intent(profile: EngagementProfile) -> bool:
    """Completed the estimate and spent at least a minute on results."""
    return profile.estimate_completed and profile.time_on_results_seconds >= HIGH_INTENT_MIN_SECONDS


def reviewed_options(profile: EngagementProfile) -> bool:
    return profile.viewed_comparison or profile.tier_toggle_count >= REVIEWED_OPTIONS_MIN_TOGGLES


def viewed_financing(profile: EngagementProfile) -> bool:
    return profile.viewed_financing


def saved_or_shared(profile: EngagementProfile) -> bool:
    return profile.saved or profile.shared


INDICATOR_RULES: Tuple[Tuple[QualityIndicator, Callable[[EngagementProfile], bool]], ...] = (
    (QualityIndicator.HIGH_INTENT, is_high_intent),
    (QualityIndicator.REVIEWED_OPTIONS, reviewed_options),
    (QualityIndicator.VIEWED_FINANCING, viewed_financing),
    (QualityIndicator.SAVED_OR_SHARED, saved_or_shared),
)


def derive_indicators(profile: Optional[EngagementProfile]) -> List[QualityIndicator]:
    """
    Derive quality indicators for a profile.

    Args:
        profile: Engagement profile (None for an estimate with no events)

    Returns:
        Indicators in display order, without duplicates
    """
    if profile is None:
        return []
    return [indicator for indicator, rule in INDICATOR_RULES if rule(profile)]
