"""Metrics bridge: serves and pushes flat JSON snapshots of a registry"""
import socket
from typing import List, Optional

import httpx

from .collectors.runtime import RuntimeStatsCollector
from .errors import HostnameResolutionError
from .exporters.http_push import PushPublisher
from .logging_config import get_logger
from .metrics.models import BridgeConfig, SnapshotRecord
from .metrics.registry import Registry
from .metrics.serializer import encode_records, serialize
from .sampler import RuntimeSampler


logger = get_logger(__name__)

TICK_INTERVAL = 1.0  # seconds


def resolve_hostname() -> str:
    """Return the local hostname or raise HostnameResolutionError"""
    try:
        hostname = socket.gethostname()
    except OSError as e:
        raise HostnameResolutionError(f"Unable to determine local hostname: {e}") from e
    if not hostname:
        raise HostnameResolutionError("Unable to determine local hostname: empty name")
    return hostname


class MetricsBridge:
    """Bridge between an in-process registry and JSON metric collectors.

    Construction resolves the hostname and registers the runtime gauges.
    ``start()`` launches the runtime sampler and, when a push URL is
    configured, the push publisher; both run until ``stop()``. The pull side
    is ``serialize_json()``, wired to HTTP by ``app.handler``.

    Example:
        ```python
        registry = Registry()
        bridge = MetricsBridge("http://collector:8080/metrics", "myapp", registry)
        async with bridge:
            registry.get_or_register_counter("requests").inc()
        ```
    """

    def __init__(self,
                 push_url: str,
                 prefix: str,
                 registry: Registry,
                 *,
                 interval: float = TICK_INTERVAL,
                 push_timeout: float = 5.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 collector: Optional[RuntimeStatsCollector] = None):
        hostname = resolve_hostname()
        self.config = BridgeConfig(registry=registry, push_url=push_url or "", prefix=prefix, hostname=hostname)

        self.sampler = RuntimeSampler(registry, collector=collector, interval=interval)
        self.publisher: Optional[PushPublisher] = None
        if self.config.push_enabled:
            self.publisher = PushPublisher(
                self.config.push_url,
                self.serialize,
                interval=interval,
                timeout=push_timeout,
                transport=transport,
            )
        self._running = False

    @classmethod
    def from_settings(cls, settings, registry: Optional[Registry] = None, **kwargs) -> "MetricsBridge":
        return cls(
            settings.push_url,
            settings.metric_prefix,
            registry if registry is not None else Registry(),
            push_timeout=settings.push_timeout,
            **kwargs
        )

    @property
    def registry(self) -> Registry:
        return self.config.registry

    @property
    def hostname(self) -> str:
        return self.config.hostname

    @property
    def prefix(self) -> str:
        return self.config.prefix

    @property
    def push_enabled(self) -> bool:
        return self.config.push_enabled

    @property
    def is_running(self) -> bool:
        return self._running

    def serialize(self) -> List[SnapshotRecord]:
        return serialize(self.config.registry, self.config.prefix, self.config.hostname)

    def serialize_json(self) -> str:
        return encode_records(self.serialize())

    async def start(self) -> None:
        if self._running:
            return
        self.sampler.start()
        if self.publisher is not None:
            await self.publisher.start()
        self._running = True
        logger.info(
            "Metrics bridge started",
            hostname=self.hostname,
            prefix=self.prefix,
            push_enabled=self.push_enabled,
            event_type="bridge_start"
        )

    async def stop(self) -> None:
        if not self._running:
            return
        try:
            if self.publisher is not None:
                await self.publisher.shutdown()
        finally:
            await self.sampler.stop()
            self._running = False
        logger.info("Metrics bridge stopped", event_type="bridge_stop")

    async def __aenter__(self) -> "MetricsBridge":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
