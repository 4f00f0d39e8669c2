"""Tests for the event ingestor."""

from datetime import timedelta

from modules.engagement.aggregator import ProfileAggregator
from modules.engagement.ingestor import EventIngestor
from modules.engagement.store import InMemoryProfileStore, ProfileStoreError


class FailingStore(InMemoryProfileStore):
    """Store whose writes always fail."""

    def set(self, profile):
        raise ProfileStoreError("disk full")


class ExplodingAggregator:
    def fold(self, estimate_id, event):
        raise RuntimeError("boom")


def raw(kind, estimate_id="est-1", **payload):
    return {"estimateId": estimate_id, "kind": kind, "payload": payload}


class TestIngest:
    def test_valid_event_is_folded(self, ingestor, store, metrics):
        result = ingestor.ingest(raw("financing_viewed"))

        assert result.accepted is True
        assert result.reason is None
        assert store.get("est-1").viewed_financing is True
        assert metrics.get_kind_metrics("financing_viewed").accepted == 1

    def test_invalid_event_is_rejected_and_counted(self, ingestor, store, metrics):
        result = ingestor.ingest(raw("scroll_depth", percent=250))

        assert result.accepted is False
        assert "scroll_depth" in result.reason
        assert store.get("est-1") is None
        assert metrics.get_kind_metrics("scroll_depth").rejected == 1

    def test_unknown_kind_counted_under_unknown(self, ingestor, metrics):
        ingestor.ingest(raw("hovered_button"))

        assert metrics.get_kind_metrics("unknown").rejected == 1
        assert metrics.get_kind_metrics("hovered_button") is None

    def test_non_mapping_body_does_not_raise(self, ingestor):
        result = ingestor.ingest("not an event")
        assert result.accepted is False

    def test_far_future_event_rejected(self, aggregator, metrics, now):
        ingestor = EventIngestor(aggregator=aggregator, metrics=metrics, max_future_skew_seconds=60)
        result = ingestor.ingest(
            {
                "estimateId": "est-1",
                "kind": "saved",
                "occurredAt": (now + timedelta(minutes=5)).isoformat(),
            },
            now=now
        )

        assert result.accepted is False
        assert "future" in result.reason

    def test_rejection_logs_without_pii(self, ingestor, metrics):
        result = ingestor.ingest(raw("tier_selected", tier_id="gold", email="owner@example.com"))

        assert result.accepted is False
        assert metrics.get_summary_stats()["total_rejected"] == 1


class TestIngestFailures:
    def test_storage_failure_is_swallowed(self, metrics):
        ingestor = EventIngestor(
            aggregator=ProfileAggregator(store=FailingStore()),
            metrics=metrics
        )
        result = ingestor.ingest(raw("saved"))

        assert result.accepted is False
        assert result.reason == "storage_error"
        assert metrics.get_kind_metrics("saved").failed == 1

    def test_unexpected_failure_is_swallowed(self, metrics):
        ingestor = EventIngestor(aggregator=ExplodingAggregator(), metrics=metrics)
        result = ingestor.ingest(raw("saved"))

        assert result.accepted is False
        assert result.reason == "storage_error"

    def test_each_event_folded_once(self, ingestor, store):
        ingestor.ingest(raw("tier_selected", tier_id="good"))
        ingestor.ingest(raw("tier_selected", tier_id="best"))

        assert store.get("est-1").tier_toggle_count == 2


class TestRejectionReasons:
    def test_distinct_unknown_kinds_share_one_reason(self, ingestor, metrics):
        for i in range(200):
            result = ingestor.ingest(raw(f"junk-{i}"))
            assert result.reason == "unknown event kind"

        stats = metrics.get_summary_stats()
        assert stats["top_rejection_reasons"] == {"unknown event kind": 200}
        assert metrics.get_kind_metrics("unknown").rejected == 200

    def test_oversized_kind_not_echoed_in_reason(self, ingestor):
        result = ingestor.ingest(raw("x" * 10_000))

        assert result.reason == "unknown event kind"


class TestCollaboratorSelection:
    def test_injected_collaborators_are_used(self, store, metrics):
        mine = InMemoryProfileStore()
        aggregator = ProfileAggregator(store=mine)
        ingestor = EventIngestor(aggregator=aggregator, metrics=metrics)

        ingestor.ingest(raw("saved"))

        assert ingestor.aggregator is aggregator
        assert ingestor.metrics is metrics
        assert mine.get("est-1").saved is True
        assert store.get("est-1") is None
