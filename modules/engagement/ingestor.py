"""
Event ingestor.

Validates raw events and forwards each accepted event exactly once to the
aggregator. Never raises: rejected events and storage failures are logged
and counted, and the caller always gets an ``IngestResult`` back.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from core.config import get_config
from core.log_masking import MAX_LOGGED_STRING, sanitize_payload
from core.logger import get_logger
from modules.engagement.aggregator import ProfileAggregator
from modules.engagement.dispatch import run_best_effort
from modules.engagement.events import EventKind, validate_event
from modules.metrics.ingestion_metrics import (
    UNKNOWN_KIND,
    IngestionMetricsCollector,
    get_metrics_collector,
)

logger = get_logger(__name__)

_KNOWN_KINDS = {kind.value for kind in EventKind}


@dataclass(frozen=True)
class IngestResult:
    """Internal ingestion outcome. Not surfaced to event producers."""

    accepted: bool
    reason: Optional[str] = None


def _kind_label(raw: Any) -> str:
    """Metric label for a raw event; unknown kinds share one bucket."""
    if isinstance(raw, Mapping):
        kind = raw.get("kind", raw.get("event"))
        if isinstance(kind, str) and kind in _KNOWN_KINDS:
            return kind
    return UNKNOWN_KIND


def _raw_kind(raw: Any) -> Optional[str]:
    """Submitted kind for log lines, truncated."""
    if not isinstance(raw, Mapping):
        return None
    kind = raw.get("kind", raw.get("event"))
    return None if kind is None else repr(kind)[:MAX_LOGGED_STRING]


class EventIngestor:
    """Accepts one raw event at a time."""

    def __init__(
        self,
        aggregator: Optional[ProfileAggregator] = None,
        metrics: Optional[IngestionMetricsCollector] = None,
        max_future_skew_seconds: Optional[int] = None
    ):
        """
        Initialize ingestor.

        Args:
            aggregator: Profile aggregator (default uses the global store)
            metrics: Metrics collector (default uses the global collector)
            max_future_skew_seconds: Far-future tolerance (uses config if not provided)
        """
        self.aggregator = aggregator if aggregator is not None else ProfileAggregator()
        self.metrics = metrics if metrics is not None else get_metrics_collector()
        if max_future_skew_seconds is None:
            max_future_skew_seconds = get_config().max_event_future_skew_seconds
        self.max_future_skew_seconds = max_future_skew_seconds

    def ingest(self, raw: Any, now: Optional[datetime] = None) -> IngestResult:
        """
        Validate and fold a raw event.

        Args:
            raw: Candidate event mapping
            now: Reference time for validation (defaults to current UTC time)

        Returns:
            IngestResult describing the outcome
        """
        ok, result = run_best_effort("ingest_event", self._ingest, raw, now)
        if not ok:
            run_best_effort("record_ingest_failure", self.metrics.record_failed, _kind_label(raw))
            return IngestResult(accepted=False, reason="internal_error")
        return result

    def _ingest(self, raw: Any, now: Optional[datetime]) -> IngestResult:
        event, reason = validate_event(
            raw,
            now=now,
            max_future_skew_seconds=self.max_future_skew_seconds
        )

        if event is None:
            kind = _kind_label(raw)
            payload = raw.get("payload") if isinstance(raw, Mapping) else None
            logger.warning(
                "Rejected engagement event",
                reason=reason,
                kind=kind,
                submitted_kind=_raw_kind(raw),
                payload=sanitize_payload(payload)
            )
            self.metrics.record_rejected(kind, reason)
            return IngestResult(accepted=False, reason=reason)

        folded, _ = run_best_effort(
            "fold_engagement_event",
            self.aggregator.fold,
            event.estimate_id,
            event
        )
        if not folded:
            self.metrics.record_failed(event.kind.value)
            return IngestResult(accepted=False, reason="storage_error")

        self.metrics.record_accepted(event.kind.value)
        return IngestResult(accepted=True)


# Global ingestor instance
_ingestor: Optional[EventIngestor] = None


def get_ingestor() -> EventIngestor:
    """Get or create global ingestor instance."""
    global _ingestor
    if _ingestor is None:
        _ingestor = EventIngestor()
    return _ingestor


def reset_ingestor() -> None:
    """Discard the global ingestor (picks up a new store or config on next use)."""
    global _ingestor
    _ingestor = None
