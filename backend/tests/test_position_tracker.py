"""
Selah Backend — Companion Client & Position Tracker Tests
==========================================================
"""

import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from app.companion import CompanionClient, PositionTracker


class FakePlayer:
    def __init__(self, current_time: float = 0.0):
        self.current_time = current_time
        self.seeks = []

    def get_current_time(self) -> float:
        return self.current_time

    def seek(self, seconds: float) -> None:
        self.seeks.append(seconds)
        self.current_time = seconds


def _client(last_position=0):
    client = AsyncMock()
    client.get_livestream.return_value = {"id": 7, "lastViewPosition": last_position}
    client.update_position.return_value = {"id": 7}
    return client


class TestRestore:

    @pytest.mark.asyncio
    async def test_seeks_to_stored_position(self):
        player = FakePlayer()
        tracker = PositionTracker(_client(95), 7, player)

        assert await tracker.restore() == 95
        assert player.seeks == [95]

    @pytest.mark.asyncio
    async def test_restores_only_once(self):
        player = FakePlayer()
        client = _client(95)
        tracker = PositionTracker(client, 7, player)

        await tracker.restore()
        assert await tracker.restore() is None
        assert player.seeks == [95]
        client.get_livestream.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_zero_position_does_not_seek(self):
        player = FakePlayer()
        assert await PositionTracker(_client(0), 7, player).restore() is None
        assert player.seeks == []

    @pytest.mark.asyncio
    async def test_load_failure_is_ignored(self):
        client = _client()
        client.get_livestream.side_effect = httpx.ConnectError("down")
        player = FakePlayer()

        assert await PositionTracker(client, 7, player).restore() is None
        assert player.seeks == []


class TestTick:

    @pytest.mark.asyncio
    async def test_each_mark_sent_once(self):
        player = FakePlayer()
        client = _client()
        tracker = PositionTracker(client, 7, player)

        sent = []
        for t in (0.0, 12.0, 29.5, 30.2, 30.9, 45.0, 60.0, 60.4):
            player.current_time = t
            sent.append(await tracker.tick())

        assert sent == [None, None, None, 30, None, None, 60, None]
        assert [c.args for c in client.update_position.await_args_list] == [(7, 30), (7, 60)]

    @pytest.mark.asyncio
    async def test_failed_save_is_not_retried(self):
        player = FakePlayer(30.0)
        client = _client()
        client.update_position.side_effect = httpx.HTTPStatusError(
            "boom", request=httpx.Request("PATCH", "http://x"), response=httpx.Response(500)
        )
        tracker = PositionTracker(client, 7, player)

        assert await tracker.tick() == 30
        assert await tracker.tick() is None
        client.update_position.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_mark_reached_again_after_rewind_is_saved(self):
        player = FakePlayer()
        client = _client()
        tracker = PositionTracker(client, 7, player)

        sent = []
        for t in (30.0, 60.0, 90.0, 20.0, 30.0, 30.6, 45.0):
            player.current_time = t
            sent.append(await tracker.tick())

        assert sent == [30, 60, 90, None, 30, None, None]
        assert client.update_position.await_args_list[-1].args == (7, 30)

    def test_due_mark(self):
        tracker = PositionTracker(_client(), 7, FakePlayer())
        assert tracker.due_mark(90.7) == 90
        assert tracker.due_mark(91.0) is None
        assert tracker.due_mark(0.0) is None


class TestRunLoop:

    @pytest.mark.asyncio
    async def test_run_restores_then_stops(self):
        player = FakePlayer()
        client = _client(60)
        tracker = PositionTracker(client, 7, player, interval=0.01)

        task = asyncio.create_task(tracker.run())
        await asyncio.sleep(0.05)
        tracker.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert player.seeks == [60]
        # Restored position is itself a mark and gets saved once
        client.update_position.assert_awaited_once_with(7, 60)


class TestCompanionClient:

    @pytest.mark.asyncio
    async def test_sends_bearer_and_camel_case_body(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": 1, "timestampSeconds": 95})

        async with CompanionClient(
            "http://selah.test", "tok-123", transport=httpx.MockTransport(handler)
        ) as client:
            note = await client.create_note(7, "Grace John 3:16", timestamp_seconds=95)

        assert note["timestampSeconds"] == 95
        [request] = seen
        assert request.method == "POST"
        assert request.url.path == "/api/livestreams/7/notes"
        assert request.headers["Authorization"] == "Bearer tok-123"
        assert request.headers["X-Request-ID"]
        assert json.loads(request.content) == {"content": "Grace John 3:16", "timestampSeconds": 95}

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404, json={}))
        async with CompanionClient("http://selah.test", "tok", transport=transport) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.get_livestream(99)

    @pytest.mark.asyncio
    async def test_position_update_payload(self):
        bodies = []

        def handler(request):
            bodies.append((request.method, request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={"id": 7, "lastViewPosition": 120})

        async with CompanionClient("http://selah.test", "tok", transport=httpx.MockTransport(handler)) as client:
            await client.update_position(7, 120)

        assert bodies == [("PATCH", "/api/livestreams/7/position", {"position": 120})]
