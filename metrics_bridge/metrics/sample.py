"""Exponentially-decaying reservoir sample and sample statistics"""
import heapq
import itertools
import math
import random
import threading
import time
from typing import Callable, List, Sequence, Tuple

DEFAULT_RESERVOIR_SIZE = 1028
DEFAULT_ALPHA = 0.015
RESCALE_THRESHOLD = 60 * 60  # seconds


class SampleSnapshot:
    """Frozen view over the values held by a sample at one instant.

    ``count`` is the number of updates the sample has ever seen, which can be
    larger than the number of values retained in the reservoir. Every
    statistic other than ``count`` is computed over the retained values and is
    0 for an empty sample.
    """

    def __init__(self, count: int, values: Sequence[int]):
        self._count = count
        self._values = sorted(values)

    @property
    def count(self) -> int:
        return self._count

    @property
    def size(self) -> int:
        return len(self._values)

    @property
    def values(self) -> List[int]:
        return list(self._values)

    def min(self) -> int:
        if not self._values:
            return 0
        return self._values[0]

    def max(self) -> int:
        if not self._values:
            return 0
        return self._values[-1]

    def sum(self) -> int:
        return sum(self._values)

    def mean(self) -> float:
        if not self._values:
            return 0.0
        return float(self.sum()) / len(self._values)

    def variance(self) -> float:
        if not self._values:
            return 0.0
        mean = self.mean()
        return sum((v - mean) ** 2 for v in self._values) / len(self._values)

    def std_dev(self) -> float:
        return math.sqrt(self.variance())

    def percentile(self, quantile: float) -> float:
        """Interpolated value at ``quantile`` (0..1) over the sorted values"""
        return self.percentiles([quantile])[0]

    def percentiles(self, quantiles: Sequence[float]) -> List[float]:
        size = len(self._values)
        scores = []
        for q in quantiles:
            if size == 0:
                scores.append(0.0)
                continue
            pos = q * (size + 1)
            if pos < 1.0:
                scores.append(float(self._values[0]))
            elif pos >= size:
                scores.append(float(self._values[-1]))
            else:
                lower = self._values[int(pos) - 1]
                upper = self._values[int(pos)]
                scores.append(lower + (pos - math.floor(pos)) * (upper - lower))
        return scores


class ExpDecayingSample:
    """Reservoir of bounded size biased towards recent updates.

    Each value is kept with priority ``exp(alpha * age) / u`` with ``u`` drawn
    uniformly from (0, 1]; once the reservoir is full a new value replaces the
    lowest-priority entry only when it outranks it. Priorities are rescaled
    against a fresh landmark every hour so they stay within float range.
    """

    def __init__(self,
                 reservoir_size: int = DEFAULT_RESERVOIR_SIZE,
                 alpha: float = DEFAULT_ALPHA,
                 clock: Callable[[], float] = time.monotonic):
        if reservoir_size < 1:
            raise ValueError("reservoir_size must be positive")
        self.reservoir_size = reservoir_size
        self.alpha = alpha
        self._clock = clock
        self._lock = threading.Lock()
        self._heap: List[Tuple[float, int, int]] = []
        self._seq = itertools.count()
        self._count = 0
        self._start = self._clock()
        self._next_rescale = self._start + RESCALE_THRESHOLD

    def update(self, value: int) -> None:
        now = self._clock()
        with self._lock:
            # rescale first so the exponent below stays under alpha * RESCALE_THRESHOLD
            if now >= self._next_rescale:
                self._rescale(now)
            self._count += 1
            priority = math.exp(self.alpha * (now - self._start)) / (1.0 - random.random())
            entry = (priority, next(self._seq), value)
            if len(self._heap) < self.reservoir_size:
                heapq.heappush(self._heap, entry)
            elif priority > self._heap[0][0]:
                heapq.heapreplace(self._heap, entry)

    def _rescale(self, now: float) -> None:
        # underflows to 0.0 after a long idle gap, which only ranks old entries last
        factor = math.exp(-self.alpha * (now - self._start))
        self._heap = [(p * factor, seq, v) for p, seq, v in self._heap]
        heapq.heapify(self._heap)
        self._start = now
        self._next_rescale = now + RESCALE_THRESHOLD

    def clear(self) -> None:
        with self._lock:
            self._heap = []
            self._count = 0
            self._start = self._clock()
            self._next_rescale = self._start + RESCALE_THRESHOLD

    def count(self) -> int:
        return self._count

    def size(self) -> int:
        return len(self._heap)

    def snapshot(self) -> SampleSnapshot:
        with self._lock:
            return SampleSnapshot(self._count, [v for _, _, v in self._heap])
