"""
Engagement profile aggregator.

Folds one event at a time into the profile for its estimate. Every fold is
order-independent: max-folds never go backwards, set-once flags never reset,
and detail fields are resolved by comparing event timestamps. Only the tier
toggle counter is sensitive to duplicate delivery; a duplicate can never
create the first toggle, and the gate outcome does not change between a
count of 1 and any higher count.
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Dict, Iterator, List, Optional

from core.logger import get_logger
from core.state import EngagementProfile
from modules.engagement.events import EngagementEvent, EventKind
from modules.engagement.store import ProfileStore, get_profile_store

logger = get_logger(__name__)


def _earliest(current: Optional[datetime], incoming: datetime) -> datetime:
    return incoming if current is None or incoming < current else current


def _latest(current: Optional[datetime], incoming: datetime) -> datetime:
    return incoming if current is None or incoming > current else current


# Max-folds

def _fold_results_page_time(profile: EngagementProfile, event: EngagementEvent) -> None:
    profile.time_on_results_seconds = max(profile.time_on_results_seconds, event.payload["seconds"])
    profile.results_page_last_viewed_at = _latest(profile.results_page_last_viewed_at, event.occurred_at)


def _fold_scroll_depth(profile: EngagementProfile, event: EngagementEvent) -> None:
    profile.max_scroll_depth_percent = max(profile.max_scroll_depth_percent, event.payload["percent"])


# Set-once folds

def _fold_estimate_completed(profile: EngagementProfile, event: EngagementEvent) -> None:
    profile.estimate_completed = True
    profile.estimate_completed_at = _earliest(profile.estimate_completed_at, event.occurred_at)


def _fold_comparison_viewed(profile: EngagementProfile, event: EngagementEvent) -> None:
    profile.viewed_comparison = True
    profile.viewed_comparison_at = _earliest(profile.viewed_comparison_at, event.occurred_at)


def _fold_financing_viewed(profile: EngagementProfile, event: EngagementEvent) -> None:
    profile.viewed_financing = True
    profile.viewed_financing_at = _earliest(profile.viewed_financing_at, event.occurred_at)


def _fold_next_steps_viewed(profile: EngagementProfile, event: EngagementEvent) -> None:
    profile.viewed_next_steps = True
    profile.viewed_next_steps_at = _earliest(profile.viewed_next_steps_at, event.occurred_at)


def _fold_saved(profile: EngagementProfile, event: EngagementEvent) -> None:
    profile.saved = True
    profile.saved_at = _earliest(profile.saved_at, event.occurred_at)


def _fold_shared(profile: EngagementProfile, event: EngagementEvent) -> None:
    profile.shared = True
    profile.shared_at = _earliest(profile.shared_at, event.occurred_at)


# Counter fold

def _fold_tier_selected(profile: EngagementProfile, event: EngagementEvent) -> None:
    profile.selected_tier = True
    profile.tier_toggle_count += 1
    # Latest-occurring selection wins; ties keep the first applied.
    if profile.selected_tier_at is None or event.occurred_at > profile.selected_tier_at:
        profile.selected_tier_id = event.payload["tier_id"]
        profile.selected_tier_at = event.occurred_at


# Detail fold

def _fold_results_page_loaded(profile: EngagementProfile, event: EngagementEvent) -> None:
    # Load time of the earliest page load is kept.
    first_viewed = profile.results_page_first_viewed_at
    if first_viewed is None or event.occurred_at < first_viewed:
        profile.results_page_load_ms = event.payload["load_time_ms"]
        profile.results_page_first_viewed_at = event.occurred_at
    profile.results_page_last_viewed_at = _latest(profile.results_page_last_viewed_at, event.occurred_at)


FOLDERS: Dict[EventKind, Callable[[EngagementProfile, EngagementEvent], None]] = {
    EventKind.RESULTS_PAGE_TIME: _fold_results_page_time,
    EventKind.SCROLL_DEPTH: _fold_scroll_depth,
    EventKind.ESTIMATE_COMPLETED: _fold_estimate_completed,
    EventKind.COMPARISON_VIEWED: _fold_comparison_viewed,
    EventKind.FINANCING_VIEWED: _fold_financing_viewed,
    EventKind.NEXT_STEPS_VIEWED: _fold_next_steps_viewed,
    EventKind.SAVED: _fold_saved,
    EventKind.SHARED: _fold_shared,
    EventKind.TIER_SELECTED: _fold_tier_selected,
    EventKind.RESULTS_PAGE_LOADED: _fold_results_page_loaded,
}


def apply_event(profile: EngagementProfile, event: EngagementEvent) -> EngagementProfile:
    """Fold a single event into ``profile`` in place and return it."""
    FOLDERS[event.kind](profile, event)
    profile.created_at = min(profile.created_at, event.occurred_at)
    profile.last_updated_at = max(profile.last_updated_at, event.occurred_at)
    return profile

class ProfileAggregator:
    """Single writer of engagement profiles, one lock per estimate."""

    def __init__(self, store: Optional[ProfileStore] = None):
        """
        Initialize aggregator.

        Args:
            store: Profile store (uses the configured global store if not provided)
        """
        self.store = store if store is not None else get_profile_store()
        # estimate_id -> [lock, holders]; entries live only while a fold is in flight
        self._locks: Dict[str, List] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _locked(self, estimate_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.setdefault(estimate_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[estimate_id]

    def active_locks(self) -> int:
        """Number of estimates with a fold in flight."""
        with self._locks_guard:
            return len(self._locks)

    def fold(self, estimate_id: str, event: EngagementEvent) -> EngagementProfile:
        """
        Fold an event into the profile for ``estimate_id``.

        Creates the profile on first event with ``created_at`` set to the
        event's ``occurred_at``; later events that occurred earlier move
        ``created_at`` back.

        Returns:
            The updated profile (a copy; the store holds the canonical value)
        """
        def mutate(profile: Optional[EngagementProfile]) -> EngagementProfile:
            if profile is None:
                profile = EngagementProfile(
                    estimate_id=estimate_id,
                    created_at=event.occurred_at,
                    last_updated_at=event.occurred_at,
                )
                logger.debug("Created engagement profile", estimate_id=estimate_id)
            return apply_event(profile, event)

        with self._locked(estimate_id):
            profile = self.store.update(estimate_id, mutate)

        logger.debug(
            "Folded engagement event",
            estimate_id=estimate_id,
            kind=event.kind.value,
            strategy=event.fold_strategy.value
        )
        return profile
