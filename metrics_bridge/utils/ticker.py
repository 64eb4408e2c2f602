"""Fixed-interval background loop with cooperative shutdown"""
import asyncio
from typing import Awaitable, Callable, Optional

from ..logging_config import get_logger, log_error


logger = get_logger(__name__)


class Ticker:
    """Runs ``callback`` every ``interval`` seconds on the running event loop.

    The first call happens one interval after ``start()``. ``stop()`` sets an
    event that is checked at each tick boundary; a callback already in flight
    finishes before the loop exits. Errors raised by the callback are logged
    and the next tick runs as usual.
    """

    def __init__(self, interval: float, callback: Callable[[], Awaitable[None]], name: str = "ticker"):
        self.interval = interval
        self.name = name
        self._callback = callback
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name=self.name)
        logger.debug("Ticker started", ticker=self.name, interval=self.interval, event_type="ticker_start")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        try:
            await self._task
        finally:
            self._task = None
        logger.debug("Ticker stopped", ticker=self.name, ticks=self.ticks, event_type="ticker_stop")

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                return
            except asyncio.TimeoutError:
                pass

            self.ticks += 1
            try:
                await self._callback()
            except Exception as e:
                log_error(logger, e, {"component": self.name, "tick": self.ticks})
