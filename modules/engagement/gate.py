"""
Engagement gate for high-commitment actions.

The gate is a soft nudge, not access control: a blocked decision always
carries a hint toward content the user can engage with, and the UI keeps a
manual override path to the action itself.
"""

import re
from enum import Enum
from typing import Optional

from core.state import EngagementProfile, GateDecision
from modules.engagement.indicators import derive_indicators
from modules.engagement.readiness import ReadinessTier, classify


class GateAction(str, Enum):
    """Actions the gate knows how to evaluate."""

    REQUEST_ONSITE_EVALUATION = "request_onsite_evaluation"


class UnknownGateActionError(ValueError):
    """Raised for an action the gate has no rule for."""
    pass


ONSITE_MIN_TIER = ReadinessTier.ACTIVELY_PLANNING
ONSITE_MIN_INDICATORS = 2

COMPARISON_SECTION = "comparison"
ONSITE_BLOCKED_REASON = (
    "Before scheduling a visit, take a minute to compare your options. "
    "It helps you get the most out of your on-site evaluation."
)


def _normalize_action_name(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", name.lower())


_ACTIONS_BY_KEY = {_normalize_action_name(action.value): action for action in GateAction}


def resolve_action(action) -> GateAction:
    """
    Resolve an action name to a ``GateAction``.

    Spacing, hyphens, underscores and case are ignored, so
    ``"request on-site evaluation"`` resolves like ``"request_onsite_evaluation"``.
    """
    if isinstance(action, GateAction):
        return action
    if isinstance(action, str):
        resolved = _ACTIONS_BY_KEY.get(_normalize_action_name(action))
        if resolved is not None:
            return resolved
    raise UnknownGateActionError(f"Unknown gate action: {action!r}")


def evaluate(profile: Optional[EngagementProfile], action=GateAction.REQUEST_ONSITE_EVALUATION) -> GateDecision:
    """
    Decide whether the caller may proceed directly to ``action``.

    For on-site evaluation requests, passes when the readiness tier is at
    least "Actively planning" OR at least two quality indicators are present,
    whichever is looser. A missing profile is evaluated as an empty one.

    Raises:
        UnknownGateActionError: If ``action`` is not a known gate action
    """
    resolve_action(action)

    if profile is None:
        profile = EngagementProfile(estimate_id="")

    indicators = derive_indicators(profile)
    tier = classify(profile, indicators)

    if tier.at_least(ONSITE_MIN_TIER) or len(indicators) >= ONSITE_MIN_INDICATORS:
        return GateDecision(allowed=True)

    return GateDecision(
        allowed=False,
        reason_if_blocked=ONSITE_BLOCKED_REASON,
        hint_target_section=COMPARISON_SECTION,
    )
