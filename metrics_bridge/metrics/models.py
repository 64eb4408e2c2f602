"""Metric kinds held by the registry and the records produced from them"""
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union

from .ewma import Meter, MeterSnapshot
from .sample import ExpDecayingSample, SampleSnapshot

Number = Union[int, float]


class MetricKind(Enum):
    """Tag carried by every registry metric; the serializer dispatches on it"""
    COUNTER = "counter"
    GAUGE = "gauge"
    GAUGE_FLOAT64 = "gauge_float64"
    TIMER = "timer"
    HISTOGRAM = "histogram"


class Metric:
    """Base class for registry metrics"""

    kind: MetricKind

    def __init__(self):
        self._lock = threading.Lock()

    def snapshot(self):
        raise NotImplementedError


class Counter(Metric):
    """Integer accumulator adjusted with inc/dec"""

    kind = MetricKind.COUNTER

    def __init__(self):
        super().__init__()
        self._count = 0

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += int(n)

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= int(n)

    def clear(self) -> None:
        with self._lock:
            self._count = 0

    def count(self) -> int:
        return self._count

    def snapshot(self) -> "CounterSnapshot":
        return CounterSnapshot(self._count)


@dataclass(frozen=True)
class CounterSnapshot:
    value: int


class Gauge(Metric):
    """Point-in-time integer value"""

    kind = MetricKind.GAUGE

    def __init__(self, value: int = 0):
        super().__init__()
        self._value = int(value)

    def update(self, value: int) -> None:
        self._value = int(value)

    def value(self) -> int:
        return self._value

    def snapshot(self) -> "GaugeSnapshot":
        return GaugeSnapshot(self._value)


@dataclass(frozen=True)
class GaugeSnapshot:
    value: Number


class GaugeFloat64(Metric):
    """Point-in-time float value"""

    kind = MetricKind.GAUGE_FLOAT64

    def __init__(self, value: float = 0.0):
        super().__init__()
        self._value = float(value)

    def update(self, value: float) -> None:
        self._value = float(value)

    def value(self) -> float:
        return self._value

    def snapshot(self) -> GaugeSnapshot:
        return GaugeSnapshot(self._value)


class HistogramSnapshot:
    """Frozen histogram statistics"""

    def __init__(self, sample: SampleSnapshot):
        self._sample = sample

    def count(self) -> int:
        return self._sample.count

    def min(self) -> int:
        return self._sample.min()

    def max(self) -> int:
        return self._sample.max()

    def mean(self) -> float:
        return self._sample.mean()

    def std_dev(self) -> float:
        return self._sample.std_dev()

    def percentile(self, quantile: float) -> float:
        return self._sample.percentile(quantile)

    def percentiles(self, quantiles) -> list:
        return self._sample.percentiles(quantiles)

    def values(self) -> list:
        """Retained sample values, sorted"""
        return self._sample.values


class Histogram(Metric):
    """Distribution of integer observations over a decaying reservoir"""

    kind = MetricKind.HISTOGRAM

    def __init__(self, sample: ExpDecayingSample = None):
        super().__init__()
        self._sample = sample or ExpDecayingSample()

    def update(self, value: int) -> None:
        self._sample.update(int(value))

    def count(self) -> int:
        return self._sample.count()

    def clear(self) -> None:
        self._sample.clear()

    def snapshot(self) -> HistogramSnapshot:
        return HistogramSnapshot(self._sample.snapshot())


class TimerSnapshot(HistogramSnapshot):
    """Frozen timer statistics: histogram of durations in ns plus event rates"""

    def __init__(self, sample: SampleSnapshot, meter: MeterSnapshot):
        super().__init__(sample)
        self._meter = meter

    def rate1(self) -> float:
        return self._meter.rate1

    def rate5(self) -> float:
        return self._meter.rate5

    def rate15(self) -> float:
        return self._meter.rate15

    def rate_mean(self) -> float:
        return self._meter.rate_mean


class Timer(Metric):
    """Records durations (stored as integer nanoseconds) and their rate"""

    kind = MetricKind.TIMER

    def __init__(self, sample: ExpDecayingSample = None, meter: Meter = None):
        super().__init__()
        self._sample = sample or ExpDecayingSample()
        self._meter = meter or Meter()

    def update(self, seconds: float) -> None:
        self.update_ns(int(seconds * 1e9))

    def update_ns(self, nanoseconds: int) -> None:
        with self._lock:
            self._sample.update(int(nanoseconds))
            self._meter.mark(1)

    def update_since(self, start: float) -> None:
        """Record the time elapsed since a ``time.perf_counter()`` reading"""
        self.update(time.perf_counter() - start)

    @contextmanager
    def time(self):
        start = time.perf_counter()
        try:
            yield
        finally:
            self.update_since(start)

    def count(self) -> int:
        return self._sample.count()

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            return TimerSnapshot(self._sample.snapshot(), self._meter.snapshot())


@dataclass(frozen=True)
class SnapshotRecord:
    """One flat (metric, value) pair as delivered to collectors"""
    timestamp: int
    metric: str
    value: Number
    hostname: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "metric": self.metric,
            "value": self.value,
            "hostname": self.hostname,
        }


@dataclass(frozen=True)
class BridgeConfig:
    """Immutable bridge configuration fixed at construction"""
    registry: Any
    push_url: str
    prefix: str
    hostname: str

    @property
    def push_enabled(self) -> bool:
        return bool(self.push_url)
