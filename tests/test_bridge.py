"""Tests for bridge construction and lifecycle"""
import asyncio
import json
from unittest.mock import MagicMock, Mock, patch

import httpx
import pytest

from metrics_bridge.bridge import MetricsBridge, resolve_hostname
from metrics_bridge.collectors.runtime import GCMonitor, RuntimeStatsCollector
from metrics_bridge.config import BridgeSettings
from metrics_bridge.errors import BridgeError, HostnameResolutionError
from metrics_bridge.metrics.registry import Registry


def make_collector():
    process = MagicMock()
    process.memory_info.return_value = Mock(rss=100, vms=300, shared=10, data=200)
    process.cpu_times.return_value = Mock(user=1.0, system=1.0)
    process.num_threads.return_value = 2
    process.num_ctx_switches.return_value = Mock(voluntary=1, involuntary=1)
    return RuntimeStatsCollector(GCMonitor(), process=process)


class TestHostnameResolution:
    """Test construction-time hostname resolution"""

    @patch('socket.gethostname', return_value="test-host")
    def test_resolve_hostname(self, _mock_hostname):
        assert resolve_hostname() == "test-host"

    @patch('socket.gethostname', side_effect=OSError("no name"))
    def test_resolution_failure_raises(self, _mock_hostname):
        with pytest.raises(HostnameResolutionError):
            MetricsBridge("", "app", Registry())

    @patch('socket.gethostname', return_value="")
    def test_empty_hostname_raises(self, _mock_hostname):
        with pytest.raises(BridgeError):
            MetricsBridge("", "app", Registry())


class TestMetricsBridge:
    """Test bridge wiring"""

    def setup_method(self):
        self.registry = Registry()
        with patch('socket.gethostname', return_value="test-host"):
            self.bridge = MetricsBridge("", "app", self.registry, collector=make_collector())

    def test_configuration(self):
        assert self.bridge.hostname == "test-host"
        assert self.bridge.prefix == "app"
        assert self.bridge.registry is self.registry
        assert self.bridge.push_enabled is False
        assert self.bridge.publisher is None
        assert self.bridge.is_running is False

    def test_construction_registers_runtime_metrics(self):
        assert "runtime.goroutines" in self.registry
        assert "runtime.mem.gc.duration" in self.registry

    def test_serialize_uses_prefix_and_hostname(self):
        self.registry.get_or_register_counter("requests").inc(3)

        records = [r for r in self.bridge.serialize() if r.metric == "app.requests"]
        assert len(records) == 1
        assert records[0].value == 3
        assert records[0].hostname == "test-host"

    def test_serialize_json(self):
        payload = json.loads(self.bridge.serialize_json())

        assert isinstance(payload, list)
        assert all(item["metric"].startswith("app.runtime.") for item in payload)

    def test_from_settings(self):
        settings = BridgeSettings(push_url="http://collector.test/ingest", metric_prefix="svc", push_timeout=1.5)

        with patch('socket.gethostname', return_value="test-host"):
            bridge = MetricsBridge.from_settings(settings, collector=make_collector())

        assert bridge.prefix == "svc"
        assert bridge.push_enabled is True
        assert bridge.publisher.url == "http://collector.test/ingest"
        assert bridge.publisher.timeout == 1.5
        assert len(bridge.registry) > 0


class TestBridgeLifecycle:
    """Test background loops"""

    @pytest.mark.asyncio
    async def test_push_disabled_never_issues_requests(self):
        with patch('socket.gethostname', return_value="test-host"):
            bridge = MetricsBridge("", "app", Registry(), interval=0.02, collector=make_collector())

        with patch('httpx.AsyncClient') as mock_client:
            async with bridge:
                await asyncio.sleep(0.15)

        mock_client.assert_not_called()
        assert bridge.sampler.samples_taken >= 1

    @pytest.mark.asyncio
    async def test_push_enabled_posts_snapshots(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(204)

        registry = Registry()
        registry.get_or_register_gauge("g").update(42)
        with patch('socket.gethostname', return_value="test-host"):
            bridge = MetricsBridge("http://collector.test/ingest", "app", registry, interval=0.05,
                                   transport=httpx.MockTransport(handler), collector=make_collector())

        await bridge.start()
        assert bridge.is_running
        await asyncio.sleep(0.3)
        await bridge.stop()

        assert not bridge.is_running
        assert len(requests) >= 1
        body = json.loads(requests[0].content)
        gauges = [item for item in body if item["metric"] == "app.g"]
        assert gauges == [{"timestamp": gauges[0]["timestamp"], "metric": "app.g", "value": 42,
                           "hostname": "test-host"}]

    @pytest.mark.asyncio
    async def test_start_is_idempotent_and_stop_is_cooperative(self):
        with patch('socket.gethostname', return_value="test-host"):
            bridge = MetricsBridge("", "app", Registry(), interval=0.02, collector=make_collector())

        await bridge.start()
        await bridge.start()
        assert bridge.sampler.running

        await bridge.stop()
        await bridge.stop()
        assert not bridge.sampler.running
        assert not bridge.sampler.collector.gc_monitor.installed
