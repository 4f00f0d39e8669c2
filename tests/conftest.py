"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timedelta, timezone

# Set before any application module reads the config
os.environ["API_KEY"] = "test-key"
os.environ["ENGAGEMENT_STORE"] = "memory"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("REDIS_HOST", None)

import pytest

from core.state import EngagementProfile
from modules.engagement.aggregator import ProfileAggregator
from modules.engagement.events import parse_event
from modules.engagement.ingestor import EventIngestor, reset_ingestor
from modules.engagement.store import InMemoryProfileStore, set_profile_store
from modules.metrics.ingestion_metrics import IngestionMetricsCollector, reset_metrics_collector

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store():
    """Fresh in-memory store installed as the global store."""
    store = InMemoryProfileStore()
    set_profile_store(store)
    reset_ingestor()
    reset_metrics_collector()
    yield store
    set_profile_store(None)
    reset_ingestor()
    reset_metrics_collector()


@pytest.fixture
def aggregator(store):
    return ProfileAggregator(store=store)


@pytest.fixture
def metrics():
    return IngestionMetricsCollector()


@pytest.fixture
def ingestor(aggregator, metrics):
    return EventIngestor(aggregator=aggregator, metrics=metrics)


@pytest.fixture
def make_event(now):
    """Build a validated event; ``offset`` is seconds relative to NOW."""

    def _make(kind, estimate_id="est-1", offset=0, **payload):
        raw = {
            "estimateId": estimate_id,
            "kind": kind,
            "occurredAt": (now + timedelta(seconds=offset)).isoformat(),
            "payload": payload,
        }
        return parse_event(raw, now=now)

    return _make


@pytest.fixture
def profile_factory():
    """Build a profile directly, bypassing events."""

    def _make(**fields):
        return EngagementProfile(estimate_id=fields.pop("estimate_id", "est-1"), **fields)

    return _make
