"""
Engagement event schema and validation.

The set of event kinds is closed: anything outside ``EventKind`` is rejected
rather than coerced. Payloads are normalised to snake_case keys so the
aggregator only ever sees one shape per kind.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from core.state import utc_now


class EventKind(str, Enum):
    """Closed enumeration of engagement event kinds."""

    ESTIMATE_COMPLETED = "estimate_completed"
    COMPARISON_VIEWED = "comparison_viewed"
    FINANCING_VIEWED = "financing_viewed"
    RESULTS_PAGE_LOADED = "results_page_loaded"
    RESULTS_PAGE_TIME = "results_page_time"
    SAVED = "saved"
    SHARED = "shared"
    TIER_SELECTED = "tier_selected"
    SCROLL_DEPTH = "scroll_depth"
    NEXT_STEPS_VIEWED = "next_steps_viewed"


class FoldStrategy(str, Enum):
    """How an event kind is folded into a profile."""

    MAX = "max"
    SET_ONCE = "set_once"
    COUNTER = "counter"
    DETAIL = "detail"


FOLD_STRATEGIES: Dict[EventKind, FoldStrategy] = {
    EventKind.ESTIMATE_COMPLETED: FoldStrategy.SET_ONCE,
    EventKind.COMPARISON_VIEWED: FoldStrategy.SET_ONCE,
    EventKind.FINANCING_VIEWED: FoldStrategy.SET_ONCE,
    EventKind.NEXT_STEPS_VIEWED: FoldStrategy.SET_ONCE,
    EventKind.SAVED: FoldStrategy.SET_ONCE,
    EventKind.SHARED: FoldStrategy.SET_ONCE,
    EventKind.RESULTS_PAGE_TIME: FoldStrategy.MAX,
    EventKind.SCROLL_DEPTH: FoldStrategy.MAX,
    EventKind.TIER_SELECTED: FoldStrategy.COUNTER,
    EventKind.RESULTS_PAGE_LOADED: FoldStrategy.DETAIL,
}

TIER_IDS = ("good", "better", "best")


class EventValidationError(ValueError):
    """Raised when a candidate event does not match the schema."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


@dataclass(frozen=True)
class EngagementEvent:
    """A validated, immutable engagement fact."""

    estimate_id: str
    kind: EventKind
    occurred_at: datetime
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def fold_strategy(self) -> FoldStrategy:
        return FOLD_STRATEGIES[self.kind]


def _pick(data: Mapping[str, Any], *names: str) -> Any:
    """Return the first present key among ``names`` (camelCase or snake_case)."""
    for name in names:
        if name in data:
            return data[name]
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_occurred_at(value: Any, now: datetime) -> datetime:
    """
    Parse an event timestamp into an aware UTC datetime.

    Accepts datetimes (naive values are taken as UTC), ISO-8601 strings and
    epoch seconds. Missing timestamps default to ``now``.
    """
    if value is None:
        return now

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise EventValidationError("occurred_at is not an ISO-8601 timestamp")
    elif _is_number(value):
        if not math.isfinite(value):
            raise EventValidationError("occurred_at must be finite")
        try:
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise EventValidationError("occurred_at is out of range")
    else:
        raise EventValidationError("occurred_at has an unsupported type")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# Payload validators: return the normalised payload or raise EventValidationError.

def _no_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return {}


def _load_time_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    load_time = _pick(payload, "load_time_ms", "loadTimeMs", "loadTime")
    if not _is_number(load_time) or not math.isfinite(load_time) or load_time < 0:
        raise EventValidationError("results_page_loaded requires a non-negative load_time_ms")
    return {"load_time_ms": float(load_time)}


def _seconds_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    seconds = _pick(payload, "seconds", "timeSpentSeconds", "time_spent_seconds")
    if isinstance(seconds, float) and math.isfinite(seconds) and seconds.is_integer():
        seconds = int(seconds)
    if not isinstance(seconds, int) or isinstance(seconds, bool) or seconds < 0:
        raise EventValidationError("results_page_time requires a non-negative integer seconds value")
    return {"seconds": seconds}


def _tier_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    tier_id = _pick(payload, "tier_id", "tierId", "tier")
    if not isinstance(tier_id, str) or tier_id.strip().lower() not in TIER_IDS:
        raise EventValidationError(f"tier_selected requires tier_id in: {', '.join(TIER_IDS)}")
    return {"tier_id": tier_id.strip().lower()}


def _percent_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    percent = _pick(payload, "percent", "depth", "scrollDepth", "scroll_depth")
    if not _is_number(percent) or not math.isfinite(percent) or not 0 <= percent <= 100:
        raise EventValidationError("scroll_depth requires a numeric percent in [0, 100]")
    return {"percent": float(percent)}


PAYLOAD_VALIDATORS: Dict[EventKind, Callable[[Mapping[str, Any]], Dict[str, Any]]] = {
    EventKind.ESTIMATE_COMPLETED: _no_payload,
    EventKind.COMPARISON_VIEWED: _no_payload,
    EventKind.FINANCING_VIEWED: _no_payload,
    EventKind.NEXT_STEPS_VIEWED: _no_payload,
    EventKind.SAVED: _no_payload,
    EventKind.SHARED: _no_payload,
    EventKind.RESULTS_PAGE_LOADED: _load_time_payload,
    EventKind.RESULTS_PAGE_TIME: _seconds_payload,
    EventKind.TIER_SELECTED: _tier_payload,
    EventKind.SCROLL_DEPTH: _percent_payload,
}


def parse_event(
    raw: Any,
    now: Optional[datetime] = None,
    max_future_skew_seconds: int = 300
) -> EngagementEvent:
    """
    Validate a raw event and build an ``EngagementEvent``.

    Args:
        raw: Candidate event mapping ``{estimateId, kind, occurredAt?, payload?}``
        now: Reference time for defaulting and the far-future check
        max_future_skew_seconds: Tolerated clock skew for ``occurredAt``

    Raises:
        EventValidationError: If any rule is violated
    """
    if not isinstance(raw, Mapping):
        raise EventValidationError("event must be an object")

    now = now or utc_now()

    estimate_id = _pick(raw, "estimate_id", "estimateId")
    if not isinstance(estimate_id, str) or not estimate_id.strip():
        raise EventValidationError("estimate_id must be a non-empty string")

    kind_value = _pick(raw, "kind", "event")
    try:
        kind = EventKind(kind_value)
    except ValueError:
        raise EventValidationError("unknown event kind")

    occurred_at = parse_occurred_at(_pick(raw, "occurred_at", "occurredAt"), now)
    if occurred_at > now + timedelta(seconds=max_future_skew_seconds):
        raise EventValidationError("occurred_at is too far in the future")

    payload = _pick(raw, "payload", "properties")
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise EventValidationError("payload must be an object")

    return EngagementEvent(
        estimate_id=estimate_id.strip(),
        kind=kind,
        occurred_at=occurred_at,
        payload=PAYLOAD_VALIDATORS[kind](payload),
    )


def validate_event(
    raw: Any,
    now: Optional[datetime] = None,
    max_future_skew_seconds: int = 300
) -> Tuple[Optional[EngagementEvent], Optional[str]]:
    """
    Validate a raw event without raising.

    Returns:
        Tuple of (event, None) when valid, (None, rejection_reason) otherwise
    """
    try:
        return parse_event(raw, now=now, max_future_skew_seconds=max_future_skew_seconds), None
    except EventValidationError as e:
        return None, e.reason
