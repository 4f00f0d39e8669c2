"""
Engagement scoring and readiness classification.
"""

from modules.engagement.events import EngagementEvent, EventKind, EventValidationError, validate_event
from modules.engagement.indicators import QualityIndicator, derive_indicators
from modules.engagement.readiness import ReadinessTier, classify
from modules.engagement.gate import GateAction, UnknownGateActionError, evaluate
from modules.engagement.aggregator import ProfileAggregator
from modules.engagement.ingestor import EventIngestor, IngestResult, get_ingestor
from modules.engagement.reader import LeadSignals, ProfileReader

__all__ = [
    "EngagementEvent",
    "EventKind",
    "EventValidationError",
    "validate_event",
    "QualityIndicator",
    "derive_indicators",
    "ReadinessTier",
    "classify",
    "GateAction",
    "UnknownGateActionError",
    "evaluate",
    "ProfileAggregator",
    "EventIngestor",
    "IngestResult",
    "get_ingestor",
    "LeadSignals",
    "ProfileReader",
]
