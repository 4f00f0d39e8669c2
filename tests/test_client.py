"""Tests for the engagement event emitter."""

import asyncio
import json

import httpx
import pytest

from modules.engagement.client import EngagementClient, ResultsPageTimer
from modules.engagement.dispatch import drain_background_tasks, fire_and_forget, run_best_effort
from modules.engagement.events import EventKind

COLLECTOR_URL = "http://collector.test/api/v1/events"


def recording_client(status_code=202):
    sent = []

    def handler(request):
        sent.append(json.loads(request.content))
        return httpx.Response(status_code, json={"success": True})

    client = EngagementClient(
        collector_url=COLLECTOR_URL,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    return client, sent


def failing_client():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    return EngagementClient(
        collector_url=COLLECTOR_URL,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


class TestEngagementClient:
    @pytest.mark.asyncio
    async def test_send_posts_event(self):
        client, sent = recording_client()

        assert await client.send("est-1", EventKind.TIER_SELECTED, {"tier_id": "best"}) is True
        assert sent[0]["estimateId"] == "est-1"
        assert sent[0]["kind"] == "tier_selected"
        assert sent[0]["payload"] == {"tier_id": "best"}
        assert sent[0]["occurredAt"]
        await client.close()

    @pytest.mark.asyncio
    async def test_send_never_raises_on_network_error(self):
        client = failing_client()

        assert await client.send("est-1", EventKind.SAVED) is False
        await client.close()

    @pytest.mark.asyncio
    async def test_send_reports_server_error(self):
        client, _ = recording_client(status_code=500)

        assert await client.send("est-1", EventKind.SAVED) is False
        await client.close()

    @pytest.mark.asyncio
    async def test_track_is_fire_and_forget(self):
        client, sent = recording_client()

        task = client.track_financing_view("est-1")
        assert isinstance(task, asyncio.Task)

        await drain_background_tasks()
        assert [event["kind"] for event in sent] == ["financing_viewed"]
        await client.close()

    @pytest.mark.asyncio
    async def test_track_failure_does_not_propagate(self):
        client = failing_client()

        client.track_save("est-1")
        await drain_background_tasks()
        await client.close()

    @pytest.mark.asyncio
    async def test_scroll_depth_clamped(self):
        client, sent = recording_client()

        client.track_scroll_depth("est-1", 140.0)
        await drain_background_tasks()

        assert sent[0]["payload"] == {"percent": 100.0}
        await client.close()

    def test_track_without_event_loop_returns_none(self):
        client, sent = recording_client()

        assert client.track_share("est-1") is None
        assert sent == []


class TestResultsPageTimer:
    @pytest.mark.asyncio
    async def test_stop_sends_final_time(self):
        client, sent = recording_client()
        timer = ResultsPageTimer(client, "est-1", interval=60)

        timer.start()
        assert await timer.stop() is True

        assert sent[-1]["kind"] == "results_page_time"
        assert sent[-1]["payload"] == {"seconds": 0}
        await client.close()

    @pytest.mark.asyncio
    async def test_periodic_reports(self):
        client, sent = recording_client()
        timer = ResultsPageTimer(client, "est-1", interval=0.01)

        timer.start()
        await asyncio.sleep(0.05)
        await timer.stop()

        assert len(sent) >= 2
        assert all(event["kind"] == "results_page_time" for event in sent)
        await client.close()

    def test_elapsed_before_start(self):
        client, _ = recording_client()
        assert ResultsPageTimer(client, "est-1").elapsed_seconds() == 0


class TestDispatch:
    def test_run_best_effort_success(self):
        assert run_best_effort("add", lambda a, b: a + b, 2, 3) == (True, 5)

    def test_run_best_effort_swallows(self):
        def explode():
            raise RuntimeError("nope")

        assert run_best_effort("explode", explode) == (False, None)

    def test_fire_and_forget_without_loop(self):
        async def work():
            return 1

        assert fire_and_forget("work", work()) is None
