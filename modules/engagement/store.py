"""
Profile store interface and the in-memory implementation.

The aggregator is the only writer; everything else reads through a store.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from core.config import get_config
from core.logger import get_logger
from core.state import EngagementProfile

logger = get_logger(__name__)


class ProfileStoreError(Exception):
    """Raised when a store backend fails to read or write a profile."""
    pass


class ProfileStore(ABC):
    """Key/value store for engagement profiles, keyed by estimate ID."""

    @abstractmethod
    def get(self, estimate_id: str) -> Optional[EngagementProfile]:
        """Return the stored profile or None."""

    @abstractmethod
    def set(self, profile: EngagementProfile) -> None:
        """Insert or replace the profile for ``profile.estimate_id``."""

    @abstractmethod
    def delete(self, estimate_id: str) -> bool:
        """Remove a profile. Returns True if one existed."""

    def update(
        self,
        estimate_id: str,
        mutate: Callable[[Optional[EngagementProfile]], EngagementProfile]
    ) -> EngagementProfile:
        """
        Read-modify-write one profile.

        The default is a plain get/set; callers serialise per key. Backends
        shared between processes override this to hold a row lock.
        """
        profile = mutate(self.get(estimate_id))
        self.set(profile)
        return profile


class InMemoryProfileStore(ProfileStore):
    """Process-local store. Hands out copies so stored state is never shared."""

    def __init__(self):
        self._profiles: Dict[str, EngagementProfile] = {}
        self._lock = threading.Lock()

    def get(self, estimate_id: str) -> Optional[EngagementProfile]:
        with self._lock:
            profile = self._profiles.get(estimate_id)
            return profile.copy() if profile else None

    def set(self, profile: EngagementProfile) -> None:
        with self._lock:
            self._profiles[profile.estimate_id] = profile.copy()

    def delete(self, estimate_id: str) -> bool:
        with self._lock:
            return self._profiles.pop(estimate_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)


# Global store instance
_profile_store: Optional[ProfileStore] = None


def get_profile_store() -> ProfileStore:
    """Get or create the configured global profile store."""
    global _profile_store
    if _profile_store is None:
        config = get_config()
        if config.engagement_store == "database":
            from modules.database.storage import DatabaseProfileStore
            _profile_store = DatabaseProfileStore()
        else:
            _profile_store = InMemoryProfileStore()
        logger.info("Initialized profile store", backend=config.engagement_store)
    return _profile_store


def set_profile_store(store: Optional[ProfileStore]) -> None:
    """Replace the global profile store (None resets to the configured default)."""
    global _profile_store
    _profile_store = store
