"""Exponentially-weighted moving averages and meters used for timer rates"""
import math
import threading
import time
from typing import Callable

TICK_INTERVAL = 5.0  # seconds between EWMA ticks

M1_ALPHA = 1 - math.exp(-TICK_INTERVAL / 60.0 / 1)
M5_ALPHA = 1 - math.exp(-TICK_INTERVAL / 60.0 / 5)
M15_ALPHA = 1 - math.exp(-TICK_INTERVAL / 60.0 / 15)


class EWMA:
    """Moving average of an event rate, in events per second"""

    def __init__(self, alpha: float):
        self.alpha = alpha
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False

    @classmethod
    def one_minute(cls) -> "EWMA":
        return cls(M1_ALPHA)

    @classmethod
    def five_minute(cls) -> "EWMA":
        return cls(M5_ALPHA)

    @classmethod
    def fifteen_minute(cls) -> "EWMA":
        return cls(M15_ALPHA)

    def update(self, n: int) -> None:
        self._uncounted += n

    def tick(self, ticks: int = 1) -> None:
        """Apply ``ticks`` intervals; only the first one sees the uncounted events"""
        if ticks < 1:
            return
        instant_rate = self._uncounted / TICK_INTERVAL
        self._uncounted = 0
        if self._initialized:
            self._rate += self.alpha * (instant_rate - self._rate)
        else:
            self._rate = instant_rate
            self._initialized = True
        # the remaining intervals saw no events
        if ticks > 1:
            self._rate *= (1 - self.alpha) ** (ticks - 1)

    def rate(self) -> float:
        return self._rate


class MeterSnapshot:
    """Frozen meter rates"""

    def __init__(self, count: int, rate1: float, rate5: float, rate15: float, rate_mean: float):
        self.count = count
        self.rate1 = rate1
        self.rate5 = rate5
        self.rate15 = rate15
        self.rate_mean = rate_mean


class Meter:
    """Counts events and tracks their one, five and fifteen minute rates.

    EWMAs are ticked lazily: every mark or read first catches up on the
    five-second ticks that elapsed since the previous one, so no background
    thread is needed.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._count = 0
        self._start = clock()
        self._last_tick = self._start
        self._m1 = EWMA.one_minute()
        self._m5 = EWMA.five_minute()
        self._m15 = EWMA.fifteen_minute()

    def _tick_if_necessary(self) -> None:
        now = self._clock()
        age = now - self._last_tick
        if age < TICK_INTERVAL:
            return
        ticks = int(age // TICK_INTERVAL)
        self._last_tick += ticks * TICK_INTERVAL
        self._m1.tick(ticks)
        self._m5.tick(ticks)
        self._m15.tick(ticks)

    def mark(self, n: int = 1) -> None:
        with self._lock:
            self._tick_if_necessary()
            self._count += n
            self._m1.update(n)
            self._m5.update(n)
            self._m15.update(n)

    def count(self) -> int:
        return self._count

    def snapshot(self) -> MeterSnapshot:
        with self._lock:
            self._tick_if_necessary()
            elapsed = self._clock() - self._start
            rate_mean = self._count / elapsed if self._count and elapsed > 0 else 0.0
            return MeterSnapshot(
                self._count,
                self._m1.rate(),
                self._m5.rate(),
                self._m15.rate(),
                rate_mean,
            )
