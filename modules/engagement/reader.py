"""
Read-only access to engagement profiles for the lead dashboard and the gate.

Both consumers call the same pure functions over the same stored profile,
so the labels a contractor sees always match what the homeowner flow used.
Reads never raise for unknown estimates or storage failures; they degrade
to "no engagement".
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from core.logger import get_logger
from core.state import EngagementProfile, GateDecision
from modules.engagement import gate
from modules.engagement.dispatch import run_best_effort
from modules.engagement.indicators import QualityIndicator, derive_indicators
from modules.engagement.readiness import ReadinessTier, classify
from modules.engagement.store import ProfileStore, get_profile_store

logger = get_logger(__name__)


@dataclass
class LeadSignals:
    """Dashboard view of one estimate's engagement."""

    estimate_id: str
    profile: Optional[EngagementProfile]
    indicators: List[QualityIndicator] = field(default_factory=list)
    tier: ReadinessTier = ReadinessTier.EXPLORING


class ProfileReader:
    """Read-only facade over the profile store."""

    def __init__(self, store: Optional[ProfileStore] = None):
        self.store = store if store is not None else get_profile_store()

    def get_profile(self, estimate_id: str) -> Optional[EngagementProfile]:
        """Return the profile for ``estimate_id`` or None."""
        ok, profile = run_best_effort("read_engagement_profile", self.store.get, estimate_id)
        if not ok:
            logger.warning("Profile read failed, treating as unengaged", estimate_id=estimate_id)
        return profile

    def get_indicators(self, estimate_id: str) -> List[QualityIndicator]:
        return derive_indicators(self.get_profile(estimate_id))

    def get_tier(self, estimate_id: str) -> ReadinessTier:
        return classify(self.get_profile(estimate_id))

    def get_lead_signals(self, estimate_id: str) -> LeadSignals:
        """Profile, indicators and tier from a single read."""
        profile = self.get_profile(estimate_id)
        indicators = derive_indicators(profile)
        return LeadSignals(
            estimate_id=estimate_id,
            profile=profile,
            indicators=indicators,
            tier=classify(profile, indicators),
        )

    def list_lead_signals(self, estimate_ids: Iterable[str]) -> List[LeadSignals]:
        """
        Signals for several estimates, most ready first.

        Ties are broken by indicator count, then by the order given.
        """
        unique_ids = list(dict.fromkeys(estimate_ids))
        signals = [self.get_lead_signals(estimate_id) for estimate_id in unique_ids]
        return sorted(
            signals,
            key=lambda s: (-s.tier.rank, -len(s.indicators))
        )

    def evaluate_gate(self, estimate_id: str, action) -> GateDecision:
        """
        Evaluate the engagement gate for an estimate.

        Raises:
            UnknownGateActionError: If ``action`` is not a known gate action
        """
        decision = gate.evaluate(self.get_profile(estimate_id), action)
        logger.debug(
            "Evaluated engagement gate",
            estimate_id=estimate_id,
            action=str(action),
            allowed=decision.allowed
        )
        return decision
