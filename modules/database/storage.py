"""
Database-backed profile store for Leadlens.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from core.config import get_config
from core.log_masking import mask_string
from core.logger import get_logger
from core.state import EngagementProfile
from modules.database.models import EngagementProfileRecord
from modules.engagement.store import ProfileStore, ProfileStoreError

logger = get_logger(__name__)

# Columns copied one-to-one between EngagementProfile and EngagementProfileRecord
PROFILE_FIELDS = (
    "time_on_results_seconds",
    "max_scroll_depth_percent",
    "estimate_completed",
    "viewed_comparison",
    "viewed_financing",
    "viewed_next_steps",
    "saved",
    "shared",
    "selected_tier",
    "tier_toggle_count",
    "selected_tier_id",
    "results_page_load_ms",
)

TIMESTAMP_FIELDS = (
    "selected_tier_at",
    "results_page_first_viewed_at",
    "results_page_last_viewed_at",
    "estimate_completed_at",
    "viewed_comparison_at",
    "viewed_financing_at",
    "viewed_next_steps_at",
    "saved_at",
    "shared_at",
    "created_at",
    "last_updated_at",
)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Backends without timezone support hand back naive UTC values."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def record_to_profile(record: EngagementProfileRecord) -> EngagementProfile:
    """Convert a database row to an EngagementProfile."""
    values = {name: getattr(record, name) for name in PROFILE_FIELDS}
    values.update({name: _as_utc(getattr(record, name)) for name in TIMESTAMP_FIELDS})
    return EngagementProfile(estimate_id=record.estimate_id, **values)


class DatabaseProfileStore(ProfileStore):
    """Stores engagement profiles in the ``engagement_profiles`` table."""

    def __init__(self, database_url: Optional[str] = None):
        """
        Initialize storage.

        Args:
            database_url: Database URL (uses config if not provided)
        """
        config = get_config()

        if database_url:
            self.database_url = database_url
        elif config.database_url:
            self.database_url = config.database_url
        else:
            self.database_url = config.database_url_from_parts

        self.engine = create_engine(self.database_url, echo=False)

        # Tables are created via Alembic migrations, not here
        self.SessionLocal = sessionmaker(bind=self.engine)

        logger.info("Initialized DatabaseProfileStore", database=mask_string(self.database_url))

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    def get(self, estimate_id: str) -> Optional[EngagementProfile]:
        """Get a profile by estimate ID."""
        session = self.get_session()
        try:
            record = session.get(EngagementProfileRecord, estimate_id)
            return record_to_profile(record) if record else None
        except SQLAlchemyError as e:
            raise ProfileStoreError(f"Failed to read profile {estimate_id}: {e}")
        finally:
            session.close()

    def set(self, profile: EngagementProfile) -> None:
        """Insert or update a profile."""
        session = self.get_session()
        try:
            record = session.get(EngagementProfileRecord, profile.estimate_id)
            if record is None:
                record = EngagementProfileRecord(estimate_id=profile.estimate_id)
                session.add(record)

            for name in PROFILE_FIELDS + TIMESTAMP_FIELDS:
                setattr(record, name, getattr(profile, name))

            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise ProfileStoreError(f"Failed to save profile {profile.estimate_id}: {e}")
        finally:
            session.close()

    def delete(self, estimate_id: str) -> bool:
        """Delete a profile."""
        session = self.get_session()
        try:
            record = session.get(EngagementProfileRecord, estimate_id)
            if not record:
                return False

            session.delete(record)
            session.commit()
            logger.info("Deleted engagement profile", estimate_id=estimate_id)
            return True
        except SQLAlchemyError as e:
            session.rollback()
            raise ProfileStoreError(f"Failed to delete profile {estimate_id}: {e}")
        finally:
            session.close()

    def update(
        self,
        estimate_id: str,
        mutate: Callable[[Optional[EngagementProfile]], EngagementProfile]
    ) -> EngagementProfile:
        """
        Read-modify-write a profile inside one transaction.

        The row is locked with SELECT ... FOR UPDATE so concurrent workers
        folding into the same estimate serialise. A lost race on first insert
        is retried once against the row the other worker created.
        """
        @retry(
            stop=stop_after_attempt(2),
            retry=retry_if_exception_type(IntegrityError),
            reraise=True
        )
        def _retry_update():
            return self._update_locked(estimate_id, mutate)

        try:
            return _retry_update()
        except IntegrityError as e:
            raise ProfileStoreError(f"Failed to create profile {estimate_id}: {e}")

    def _update_locked(
        self,
        estimate_id: str,
        mutate: Callable[[Optional[EngagementProfile]], EngagementProfile]
    ) -> EngagementProfile:
        session = self.get_session()
        try:
            record = (
                session.query(EngagementProfileRecord)
                .filter_by(estimate_id=estimate_id)
                .with_for_update()
                .first()
            )
            profile = mutate(record_to_profile(record) if record else None)

            if record is None:
                record = EngagementProfileRecord(estimate_id=estimate_id)
                session.add(record)
            for name in PROFILE_FIELDS + TIMESTAMP_FIELDS:
                setattr(record, name, getattr(profile, name))

            session.commit()
            return profile
        except IntegrityError:
            session.rollback()
            logger.debug("Concurrent profile insert", estimate_id=estimate_id)
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise ProfileStoreError(f"Failed to update profile {estimate_id}: {e}")
        finally:
            session.close()
