"""Periodic JSON push of snapshots to an HTTP collector"""
import time
from typing import Callable, List, Optional

import httpx

from ..errors import SnapshotEncodingError
from ..logging_config import get_logger, log_snapshot_published
from ..metrics.models import SnapshotRecord
from ..metrics.serializer import encode_records
from ..utils.ticker import Ticker
from .base import BaseExporter


logger = get_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class PushPublisher(BaseExporter):
    """POSTs the serialized snapshot to ``url`` once per tick.

    Delivery is at most once: transport and encoding errors drop the tick
    without retry, and the response status is not inspected.
    """

    def __init__(self,
                 url: str,
                 snapshot: Callable[[], List[SnapshotRecord]],
                 interval: float = 1.0,
                 timeout: float = 5.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self._snapshot = snapshot
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._ticker = Ticker(interval, self.publish_once, name="push_publisher")

        self.pushes_sent = 0
        self.pushes_failed = 0
        self.last_status_code: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._ticker.running

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        self._ticker.start()
        logger.info("Push publisher started", url=self.url, interval=self._ticker.interval,
                    event_type="publisher_start")

    async def shutdown(self) -> None:
        await self._ticker.stop()
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        logger.info("Push publisher stopped", pushes_sent=self.pushes_sent,
                    pushes_failed=self.pushes_failed, event_type="publisher_stop")

    def is_healthy(self) -> bool:
        return self.running

    async def publish_once(self) -> Optional[int]:
        return await self.export_metrics(self._snapshot())

    async def export_metrics(self, records: List[SnapshotRecord]) -> Optional[int]:
        """POST one snapshot; returns the response status or None when dropped"""
        start_time = time.time()
        try:
            body = encode_records(records)
        except SnapshotEncodingError as e:
            self.pushes_failed += 1
            logger.debug("Snapshot not encodable, dropping push", error=str(e), event_type="push_dropped")
            return None

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

        try:
            response = await self._client.post(self.url, content=body.encode("utf-8"), headers=JSON_HEADERS)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.pushes_failed += 1
            logger.debug("Push failed, dropping snapshot", url=self.url, error=str(e),
                         error_type=type(e).__name__, event_type="push_dropped")
            return None

        await response.aclose()
        self.pushes_sent += 1
        self.last_status_code = response.status_code
        log_snapshot_published(logger, len(records), time.time() - start_time, response.status_code)
        return response.status_code
