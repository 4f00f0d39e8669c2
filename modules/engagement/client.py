"""
Engagement event emitter.
Posts engagement events to the collector endpoint without ever blocking
or failing the caller.
"""

import asyncio
import time
from typing import Any, Dict, Optional

import httpx

from core.config import get_config
from core.logger import get_logger
from core.state import utc_now
from modules.engagement.dispatch import fire_and_forget, run_best_effort_async
from modules.engagement.events import EventKind

logger = get_logger(__name__)


class EngagementClient:
    """Sends engagement events to the collector."""

    def __init__(
        self,
        collector_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize engagement client.

        Args:
            collector_url: Event endpoint (uses config if not provided)
            timeout: Request timeout in seconds (uses config if not provided)
            client: Pre-built httpx client (tests inject a mock transport here)
        """
        config = get_config()
        self.collector_url = collector_url or config.collector_url
        self.timeout = timeout if timeout is not None else config.client_timeout_seconds
        self.client = client or httpx.AsyncClient(timeout=self.timeout)

    def _build_event(
        self,
        estimate_id: str,
        kind: EventKind,
        payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        return {
            "estimateId": estimate_id,
            "kind": EventKind(kind).value,
            "occurredAt": utc_now().isoformat(),
            "payload": payload or {},
        }

    async def send(
        self,
        estimate_id: str,
        kind: EventKind,
        payload: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Send one event and wait for the collector.

        Returns:
            True if the collector acknowledged it, False otherwise (never raises)
        """
        ok, _ = await run_best_effort_async(
            "send_engagement_event",
            self._post(estimate_id, kind, payload)
        )
        return ok

    async def _post(
        self,
        estimate_id: str,
        kind: EventKind,
        payload: Optional[Dict[str, Any]]
    ) -> None:
        event = self._build_event(estimate_id, kind, payload)
        response = await self.client.post(self.collector_url, json=event)
        response.raise_for_status()
        logger.debug("Engagement event sent", estimate_id=event["estimateId"], kind=event["kind"])

    def track(
        self,
        estimate_id: str,
        kind: EventKind,
        payload: Optional[Dict[str, Any]] = None
    ) -> Optional[asyncio.Task]:
        """Schedule an event send and return immediately."""
        return fire_and_forget(
            "track_engagement_event",
            self._post(estimate_id, kind, payload)
        )

    # Convenience wrappers

    def track_estimate_completed(self, estimate_id: str) -> Optional[asyncio.Task]:
        return self.track(estimate_id, EventKind.ESTIMATE_COMPLETED)

    def track_comparison_view(self, estimate_id: str) -> Optional[asyncio.Task]:
        return self.track(estimate_id, EventKind.COMPARISON_VIEWED)

    def track_financing_view(self, estimate_id: str) -> Optional[asyncio.Task]:
        return self.track(estimate_id, EventKind.FINANCING_VIEWED)

    def track_next_steps_view(self, estimate_id: str) -> Optional[asyncio.Task]:
        return self.track(estimate_id, EventKind.NEXT_STEPS_VIEWED)

    def track_save(self, estimate_id: str) -> Optional[asyncio.Task]:
        return self.track(estimate_id, EventKind.SAVED)

    def track_share(self, estimate_id: str) -> Optional[asyncio.Task]:
        return self.track(estimate_id, EventKind.SHARED)

    def track_results_page_load(self, estimate_id: str, load_time_ms: float) -> Optional[asyncio.Task]:
        return self.track(estimate_id, EventKind.RESULTS_PAGE_LOADED, {"load_time_ms": load_time_ms})

    def track_results_page_time(self, estimate_id: str, seconds: int) -> Optional[asyncio.Task]:
        return self.track(estimate_id, EventKind.RESULTS_PAGE_TIME, {"seconds": int(seconds)})

    def track_tier_selection(self, estimate_id: str, tier_id: str) -> Optional[asyncio.Task]:
        return self.track(estimate_id, EventKind.TIER_SELECTED, {"tier_id": tier_id})

    def track_scroll_depth(self, estimate_id: str, percent: float) -> Optional[asyncio.Task]:
        return self.track(estimate_id, EventKind.SCROLL_DEPTH, {"percent": min(100.0, max(0.0, percent))})

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()


class ResultsPageTimer:
    """
    Reports cumulative time on the results page.

    Sends a ``results_page_time`` update every ``interval`` seconds while
    running and a final one on ``stop()``. The field is max-folded on the
    server, so a final update racing a periodic one is harmless.
    """

    def __init__(
        self,
        client: EngagementClient,
        estimate_id: str,
        interval: Optional[float] = None
    ):
        self.client = client
        self.estimate_id = estimate_id
        self.interval = interval if interval is not None else get_config().time_report_interval_seconds
        self._started_at: Optional[float] = None
        self._task: Optional[asyncio.Task] = None

    def elapsed_seconds(self) -> int:
        if self._started_at is None:
            return 0
        return int(time.monotonic() - self._started_at)

    def start(self) -> None:
        """Start periodic reporting on the running event loop."""
        if self._task is not None:
            return
        self._started_at = time.monotonic()
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.client.send(self.estimate_id, EventKind.RESULTS_PAGE_TIME, {"seconds": self.elapsed_seconds()})

    async def stop(self) -> bool:
        """Stop reporting and send the final cumulative time."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        return await self.client.send(
            self.estimate_id,
            EventKind.RESULTS_PAGE_TIME,
            {"seconds": self.elapsed_seconds()}
        )
