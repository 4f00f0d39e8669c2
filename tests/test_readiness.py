"""Tests for readiness tier classification."""

import pytest

from modules.engagement.indicators import derive_indicators
from modules.engagement.readiness import ReadinessTier, classify


class TestClassify:
    def test_missing_profile_is_exploring(self):
        assert classify(None) is ReadinessTier.EXPLORING

    def test_empty_profile_is_exploring(self, profile_factory):
        assert classify(profile_factory()) is ReadinessTier.EXPLORING

    def test_ready_via_next_steps(self, profile_factory):
        profile = profile_factory(estimate_completed=True, viewed_next_steps=True, time_on_results_seconds=90)
        assert classify(profile) is ReadinessTier.READY_FOR_ONSITE

    def test_ready_via_tier_toggles(self, profile_factory):
        profile = profile_factory(estimate_completed=True, tier_toggle_count=2, time_on_results_seconds=120)
        assert classify(profile) is ReadinessTier.READY_FOR_ONSITE

    def test_ready_needs_ninety_seconds(self, profile_factory):
        profile = profile_factory(
            estimate_completed=True,
            viewed_next_steps=True,
            viewed_comparison=True,
            time_on_results_seconds=89,
        )
        assert classify(profile) is ReadinessTier.ACTIVELY_PLANNING

    def test_single_toggle_is_not_ready(self, profile_factory):
        profile = profile_factory(estimate_completed=True, tier_toggle_count=1, time_on_results_seconds=200)
        assert classify(profile) is ReadinessTier.EXPLORING

    @pytest.mark.parametrize("flag", ["viewed_comparison", "viewed_financing"])
    def test_actively_planning(self, profile_factory, flag):
        profile = profile_factory(estimate_completed=True, time_on_results_seconds=30, **{flag: True})
        assert classify(profile) is ReadinessTier.ACTIVELY_PLANNING

    def test_planning_needs_completion(self, profile_factory):
        profile = profile_factory(viewed_comparison=True, viewed_financing=True, time_on_results_seconds=600)
        assert classify(profile) is ReadinessTier.EXPLORING

    def test_planning_needs_thirty_seconds(self, profile_factory):
        profile = profile_factory(estimate_completed=True, viewed_comparison=True, time_on_results_seconds=29)
        assert classify(profile) is ReadinessTier.EXPLORING

    def test_most_ready_tier_wins(self, profile_factory):
        profile = profile_factory(
            estimate_completed=True,
            viewed_comparison=True,
            viewed_financing=True,
            viewed_next_steps=True,
            time_on_results_seconds=300,
        )
        assert classify(profile) is ReadinessTier.READY_FOR_ONSITE



BASE = {"estimate_completed": True, "viewed_comparison": True, "time_on_results_seconds": 95}


class TestIndicatorConsistency:
    @pytest.mark.parametrize(
        "left, right",
        [
            ({"max_scroll_depth_percent": 5.0}, {"max_scroll_depth_percent": 100.0}),
            ({"saved": True}, {"shared": True}),
            ({"saved": True}, {"saved": True, "shared": True}),
            ({"tier_toggle_count": 2}, {"tier_toggle_count": 5}),
            ({"time_on_results_seconds": 95}, {"time_on_results_seconds": 200}),
        ],
    )
    def test_same_indicators_same_tier(self, profile_factory, left, right):
        first = profile_factory(**{**BASE, **left})
        second = profile_factory(**{**BASE, **right})

        assert derive_indicators(first) == derive_indicators(second)
        assert classify(first) is classify(second)

    def test_tier_thresholds_outrank_indicators(self, profile_factory):
        # Both show high intent and reviewed options; only the toggle count differs
        browsing = profile_factory(**BASE, tier_toggle_count=0)
        comparing = profile_factory(**BASE, tier_toggle_count=2)

        assert derive_indicators(browsing) == derive_indicators(comparing)
        assert classify(browsing) is ReadinessTier.ACTIVELY_PLANNING
        assert classify(comparing) is ReadinessTier.READY_FOR_ONSITE

    def test_next_steps_not_an_indicator_but_decides_tier(self, profile_factory):
        planning = profile_factory(**BASE)
        ready = profile_factory(**BASE, viewed_next_steps=True)

        assert derive_indicators(planning) == derive_indicators(ready)
        assert classify(ready) is ReadinessTier.READY_FOR_ONSITE

class TestTierOrdering:
    def test_rank_order(self):
        assert ReadinessTier.EXPLORING.rank < ReadinessTier.ACTIVELY_PLANNING.rank < ReadinessTier.READY_FOR_ONSITE.rank

    def test_at_least(self):
        assert ReadinessTier.READY_FOR_ONSITE.at_least(ReadinessTier.ACTIVELY_PLANNING)
        assert ReadinessTier.ACTIVELY_PLANNING.at_least(ReadinessTier.ACTIVELY_PLANNING)
        assert not ReadinessTier.EXPLORING.at_least(ReadinessTier.ACTIVELY_PLANNING)

    def test_labels(self):
        assert ReadinessTier.EXPLORING.value == "Exploring options"
        assert ReadinessTier.ACTIVELY_PLANNING.value == "Actively planning"
        assert ReadinessTier.READY_FOR_ONSITE.value == "Ready for on-site evaluation"
