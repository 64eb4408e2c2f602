"""Tests for the HTTP push publisher"""
import asyncio
import json
from unittest.mock import patch

import httpx
import pytest

from metrics_bridge.exporters.http_push import PushPublisher
from metrics_bridge.metrics.models import SnapshotRecord

URL = "http://collector.test/ingest"


def make_records(value=1):
    return [SnapshotRecord(timestamp=1700000000, metric="app.c", value=value, hostname="test-host")]


class RecordingTransport(httpx.MockTransport):
    """Mock transport that remembers every request it answers"""

    def __init__(self, status_code: int = 200, error: Exception = None):
        self.requests = []
        self.status_code = status_code
        self.error = error
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text="ok")


class TestPushPublisher:
    """Test push delivery semantics"""

    @pytest.mark.asyncio
    async def test_posts_json_snapshot(self):
        transport = RecordingTransport()
        publisher = PushPublisher(URL, make_records, transport=transport)

        status = await publisher.publish_once()
        await publisher.shutdown()

        assert status == 200
        assert len(transport.requests) == 1
        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == URL
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == [
            {"timestamp": 1700000000, "metric": "app.c", "value": 1, "hostname": "test-host"}
        ]
        assert publisher.pushes_sent == 1

    @pytest.mark.asyncio
    async def test_error_status_is_not_a_failure(self):
        transport = RecordingTransport(status_code=503)
        publisher = PushPublisher(URL, make_records, transport=transport)

        status = await publisher.publish_once()
        await publisher.shutdown()

        assert status == 503
        assert publisher.pushes_sent == 1
        assert publisher.pushes_failed == 0
        assert publisher.last_status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error_is_dropped(self):
        transport = RecordingTransport(error=httpx.ConnectError("connection refused"))
        publisher = PushPublisher(URL, make_records, transport=transport)

        status = await publisher.publish_once()
        await publisher.shutdown()

        assert status is None
        assert len(transport.requests) == 1
        assert publisher.pushes_failed == 1
        assert publisher.pushes_sent == 0

    @pytest.mark.asyncio
    async def test_invalid_url_is_dropped(self):
        transport = RecordingTransport(error=httpx.InvalidURL("invalid URL"))
        publisher = PushPublisher(URL, make_records, transport=transport)

        status = await publisher.publish_once()
        await publisher.shutdown()

        assert status is None
        assert publisher.pushes_failed == 1
        assert publisher.pushes_sent == 0

    @pytest.mark.asyncio
    async def test_invalid_url_does_not_reach_tick_error_log(self):
        transport = RecordingTransport(error=httpx.InvalidURL("invalid URL"))
        publisher = PushPublisher(URL, make_records, interval=0.05, transport=transport)

        with patch("metrics_bridge.utils.ticker.log_error") as mock_log_error:
            await publisher.start()
            await asyncio.sleep(0.2)
            await publisher.shutdown()

        mock_log_error.assert_not_called()
        assert publisher.pushes_failed == len(transport.requests)

    @pytest.mark.asyncio
    async def test_unencodable_snapshot_is_dropped(self):
        transport = RecordingTransport()
        publisher = PushPublisher(URL, lambda: make_records(float("nan")), transport=transport)

        status = await publisher.publish_once()
        await publisher.shutdown()

        assert status is None
        assert transport.requests == []
        assert publisher.pushes_failed == 1

    @pytest.mark.asyncio
    async def test_loop_pushes_every_tick_without_retry(self):
        transport = RecordingTransport(error=httpx.ConnectError("connection refused"))
        publisher = PushPublisher(URL, make_records, interval=0.05, transport=transport)

        await publisher.start()
        assert publisher.is_healthy()
        await asyncio.sleep(0.3)
        await publisher.shutdown()

        assert not publisher.is_healthy()
        # one attempt per tick: failures are never retried within a tick
        assert 1 <= len(transport.requests) <= 6
        assert publisher.pushes_failed == len(transport.requests)
