"""Tests for the profile reader."""

import pytest

from modules.engagement.gate import UnknownGateActionError
from modules.engagement.indicators import QualityIndicator
from modules.engagement.reader import ProfileReader
from modules.engagement.readiness import ReadinessTier
from modules.engagement.store import InMemoryProfileStore, ProfileStoreError, set_profile_store


class BrokenStore(InMemoryProfileStore):
    def get(self, estimate_id):
        raise ProfileStoreError("connection refused")


@pytest.fixture
def reader(store):
    return ProfileReader(store=store)


def seed(store, profile_factory, estimate_id, **fields):
    store.set(profile_factory(estimate_id=estimate_id, **fields))


class TestReads:
    def test_unknown_estimate_is_exploring(self, reader):
        signals = reader.get_lead_signals("missing")

        assert signals.profile is None
        assert signals.indicators == []
        assert signals.tier is ReadinessTier.EXPLORING

    def test_signals_for_stored_profile(self, store, reader, profile_factory):
        seed(store, profile_factory, "est-1", estimate_completed=True, viewed_comparison=True, time_on_results_seconds=65)

        assert reader.get_indicators("est-1") == [QualityIndicator.HIGH_INTENT, QualityIndicator.REVIEWED_OPTIONS]
        assert reader.get_tier("est-1") is ReadinessTier.ACTIVELY_PLANNING

    def test_storage_failure_degrades_to_no_engagement(self):
        reader = ProfileReader(store=BrokenStore())

        assert reader.get_profile("est-1") is None
        assert reader.get_tier("est-1") is ReadinessTier.EXPLORING
        assert reader.evaluate_gate("est-1", "request_onsite_evaluation").allowed is False

    def test_injected_empty_store_is_used(self, store, profile_factory):
        mine = InMemoryProfileStore()
        other = InMemoryProfileStore()
        other.set(profile_factory(estimate_id="est-1", saved=True))
        set_profile_store(other)

        reader = ProfileReader(store=mine)

        assert reader.store is mine
        assert reader.get_profile("est-1") is None


class TestBatchReads:
    def test_sorted_by_tier_then_indicator_count(self, store, reader, profile_factory):
        seed(store, profile_factory, "exploring-1", saved=True)
        seed(store, profile_factory, "exploring-2", saved=True, viewed_financing=True)
        seed(store, profile_factory, "ready", estimate_completed=True, viewed_next_steps=True, time_on_results_seconds=100)
        seed(store, profile_factory, "planning", estimate_completed=True, viewed_financing=True, time_on_results_seconds=40)

        ordered = [s.estimate_id for s in reader.list_lead_signals(["exploring-1", "missing", "exploring-2", "planning", "ready"])]

        assert ordered == ["ready", "planning", "exploring-2", "exploring-1", "missing"]

    def test_duplicate_ids_collapsed(self, reader):
        signals = reader.list_lead_signals(["a", "b", "a"])
        assert [s.estimate_id for s in signals] == ["a", "b"]


class TestGate:
    def test_gate_uses_stored_profile(self, store, reader, profile_factory):
        seed(store, profile_factory, "est-1", viewed_financing=True, shared=True)
        assert reader.evaluate_gate("est-1", "request_onsite_evaluation").allowed is True

    def test_unknown_action_raises(self, reader):
        with pytest.raises(UnknownGateActionError):
            reader.evaluate_gate("est-1", "cancel_order")


class TestEndToEndScenarios:
    def ingest_all(self, ingestor, events):
        for kind, payload in events:
            assert ingestor.ingest({"estimateId": "est-1", "kind": kind, "payload": payload}).accepted

    def test_completed_with_next_steps_is_ready(self, ingestor, reader):
        self.ingest_all(ingestor, [
            ("estimate_completed", {}),
            ("results_page_time", {"seconds": 95}),
            ("next_steps_viewed", {}),
        ])

        assert reader.get_tier("est-1") is ReadinessTier.READY_FOR_ONSITE
        assert QualityIndicator.HIGH_INTENT in reader.get_indicators("est-1")

    def test_brief_completed_visit_is_blocked(self, ingestor, reader):
        self.ingest_all(ingestor, [
            ("estimate_completed", {}),
            ("results_page_time", {"seconds": 10}),
        ])

        decision = reader.evaluate_gate("est-1", "request_onsite_evaluation")
        assert reader.get_tier("est-1") is ReadinessTier.EXPLORING
        assert decision.allowed is False
        assert decision.hint_target_section == "comparison"

    def test_two_indicators_open_gate_without_completion(self, ingestor, reader):
        self.ingest_all(ingestor, [
            ("comparison_viewed", {}),
            ("financing_viewed", {}),
            ("results_page_time", {"seconds": 5}),
        ])

        indicators = reader.get_indicators("est-1")
        assert QualityIndicator.REVIEWED_OPTIONS in indicators
        assert QualityIndicator.VIEWED_FINANCING in indicators
        assert reader.get_tier("est-1") is ReadinessTier.EXPLORING
        assert reader.evaluate_gate("est-1", "request_onsite_evaluation").allowed is True

    def test_scroll_depth_out_of_order(self, ingestor, reader):
        self.ingest_all(ingestor, [
            ("scroll_depth", {"percent": 80}),
            ("scroll_depth", {"percent": 60}),
            ("scroll_depth", {"percent": 80}),
        ])

        assert reader.get_profile("est-1").max_scroll_depth_percent == 80.0
