"""Tests for quality indicator rules."""

import pytest

from modules.engagement.indicators import QualityIndicator, derive_indicators


class TestDeriveIndicators:
    def test_missing_profile_has_no_indicators(self):
        assert derive_indicators(None) == []

    def test_empty_profile_has_no_indicators(self, profile_factory):
        assert derive_indicators(profile_factory()) == []

    def test_high_intent_requires_completion_and_a_minute(self, profile_factory):
        assert derive_indicators(profile_factory(estimate_completed=True, time_on_results_seconds=60)) == [
            QualityIndicator.HIGH_INTENT
        ]
        assert derive_indicators(profile_factory(estimate_completed=True, time_on_results_seconds=59)) == []
        assert derive_indicators(profile_factory(estimate_completed=False, time_on_results_seconds=300)) == []

    @pytest.mark.parametrize("fields", [
        {"viewed_comparison": True},
        {"tier_toggle_count": 1},
        {"tier_toggle_count": 7},
    ])
    def test_reviewed_options(self, profile_factory, fields):
        assert derive_indicators(profile_factory(**fields)) == [QualityIndicator.REVIEWED_OPTIONS]

    def test_viewed_financing(self, profile_factory):
        assert derive_indicators(profile_factory(viewed_financing=True)) == [QualityIndicator.VIEWED_FINANCING]

    @pytest.mark.parametrize("fields", [{"saved": True}, {"shared": True}, {"saved": True, "shared": True}])
    def test_saved_or_shared_appears_once(self, profile_factory, fields):
        assert derive_indicators(profile_factory(**fields)) == [QualityIndicator.SAVED_OR_SHARED]

    def test_all_indicators_in_display_order(self, profile_factory):
        profile = profile_factory(
            estimate_completed=True,
            time_on_results_seconds=120,
            viewed_comparison=True,
            viewed_financing=True,
            shared=True,
        )

        assert derive_indicators(profile) == [
            QualityIndicator.HIGH_INTENT,
            QualityIndicator.REVIEWED_OPTIONS,
            QualityIndicator.VIEWED_FINANCING,
            QualityIndicator.SAVED_OR_SHARED,
        ]

    def test_labels(self):
        assert [i.value for i in QualityIndicator] == [
            "High intent",
            "Reviewed options",
            "Viewed financing",
            "Saved/shared estimate",
        ]

    def test_scroll_and_next_steps_alone_are_not_indicators(self, profile_factory):
        profile = profile_factory(max_scroll_depth_percent=100.0, viewed_next_steps=True)
        assert derive_indicators(profile) == []
