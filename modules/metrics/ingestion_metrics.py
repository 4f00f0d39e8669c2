"""
Ingestion metrics tracking for monitoring and observability.
Tracks accepted, rejected and failed engagement events per kind.
"""

import threading
from collections import Counter, defaultdict
from datetime import datetime
from typing import Dict, Optional
from dataclasses import dataclass, field

from core.logger import get_logger
from core.state import utc_now

logger = get_logger(__name__)

UNKNOWN_KIND = "unknown"


@dataclass
class KindMetrics:
    """Counters for a single event kind."""

    kind: str
    accepted: int = 0
    rejected: int = 0
    failed: int = 0
    last_seen_at: Optional[datetime] = None

    def acceptance_rate(self) -> float:
        """Share of received events that were folded (0.0 to 1.0)."""
        total = self.accepted + self.rejected + self.failed
        if total == 0:
            return 1.0
        return self.accepted / total

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "kind": self.kind,
            "accepted": self.accepted,
            "rejected": self.rejected,
            "failed": self.failed,
            "acceptance_rate": round(self.acceptance_rate(), 3),
            "last_seen_at": self.last_seen_at.isoformat() if self.last_seen_at else None,
        }


class IngestionMetricsCollector:
    """
    Collects ingestion outcomes.
    Counts per event kind plus rejection reasons.
    """

    def __init__(self):
        """Initialize metrics collector."""
        self._by_kind: Dict[str, KindMetrics] = {}
        self._rejection_reasons: Counter = Counter()
        self._lock = threading.Lock()
        self.started_at = utc_now()

    def _kind(self, kind: Optional[str]) -> KindMetrics:
        key = kind or UNKNOWN_KIND
        if key not in self._by_kind:
            self._by_kind[key] = KindMetrics(kind=key)
        metrics = self._by_kind[key]
        metrics.last_seen_at = utc_now()
        return metrics

    def record_accepted(self, kind: str) -> None:
        with self._lock:
            self._kind(kind).accepted += 1

    def record_rejected(self, kind: Optional[str], reason: str) -> None:
        with self._lock:
            self._kind(kind).rejected += 1
            self._rejection_reasons[reason] += 1

    def record_failed(self, kind: Optional[str]) -> None:
        with self._lock:
            self._kind(kind).failed += 1

    def get_kind_metrics(self, kind: str) -> Optional[KindMetrics]:
        """Get counters for one event kind."""
        with self._lock:
            return self._by_kind.get(kind)

    def get_summary_stats(self) -> Dict:
        """
        Get summary statistics for ingestion since process start.

        Returns:
            Dictionary with totals, per-kind counters and top rejection reasons
        """
        with self._lock:
            kinds = [m.to_dict() for m in self._by_kind.values()]
            reasons = dict(self._rejection_reasons.most_common(10))

        totals = defaultdict(int)
        for entry in kinds:
            for key in ("accepted", "rejected", "failed"):
                totals[key] += entry[key]

        return {
            "total_accepted": totals["accepted"],
            "total_rejected": totals["rejected"],
            "total_failed": totals["failed"],
            "by_kind": sorted(kinds, key=lambda entry: entry["kind"]),
            "top_rejection_reasons": reasons,
            "since": self.started_at.isoformat(),
        }


# Global metrics collector instance
_metrics_collector: Optional[IngestionMetricsCollector] = None


def get_metrics_collector() -> IngestionMetricsCollector:
    """Get or create global metrics collector instance."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = IngestionMetricsCollector()
        logger.info("Initialized IngestionMetricsCollector")
    return _metrics_collector


def reset_metrics_collector() -> None:
    """Discard the global collector (next call creates a fresh one)."""
    global _metrics_collector
    _metrics_collector = None
