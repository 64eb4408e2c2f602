"""Thread-safe registry of named metrics"""
import threading
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import DuplicateMetricError, MetricKindMismatchError
from ..logging_config import get_logger
from .models import Counter, Gauge, GaugeFloat64, Histogram, Metric, MetricKind, Timer


logger = get_logger(__name__)


class Registry:
    """Central registry mapping unique metric names to metric instances.

    Metrics are created lazily by whichever component first asks for a name
    and are never removed by the bridge itself. All mutations go through a
    single lock; reads of metric values happen outside it.
    """

    def __init__(self):
        self._metrics: Dict[str, Metric] = {}
        self._lock = threading.Lock()

    def register(self, name: str, metric: Metric) -> Metric:
        """Register a new metric under ``name``"""
        with self._lock:
            if name in self._metrics:
                raise DuplicateMetricError(name)
            self._metrics[name] = metric
        logger.debug("Registered metric", metric=name, event_type="metric_registered")
        return metric

    def get_or_register(self, name: str, kind: MetricKind, factory: Callable[[], Metric]) -> Metric:
        """Return the metric under ``name``, creating it with ``factory`` if absent"""
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = factory()
                self._metrics[name] = metric
                logger.debug("Registered metric", metric=name, kind=kind.value, event_type="metric_registered")
            elif metric.kind is not kind:
                raise MetricKindMismatchError(name, kind, metric.kind)
            return metric

    def get_or_register_counter(self, name: str) -> Counter:
        return self.get_or_register(name, MetricKind.COUNTER, Counter)

    def get_or_register_gauge(self, name: str) -> Gauge:
        return self.get_or_register(name, MetricKind.GAUGE, Gauge)

    def get_or_register_gauge_float64(self, name: str) -> GaugeFloat64:
        return self.get_or_register(name, MetricKind.GAUGE_FLOAT64, GaugeFloat64)

    def get_or_register_timer(self, name: str) -> Timer:
        return self.get_or_register(name, MetricKind.TIMER, Timer)

    def get_or_register_histogram(self, name: str, factory: Callable[[], Histogram] = Histogram) -> Histogram:
        return self.get_or_register(name, MetricKind.HISTOGRAM, factory)

    def get(self, name: str) -> Optional[Metric]:
        return self._metrics.get(name)

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._metrics.pop(name, None) is not None

    def each(self) -> List[Tuple[str, Metric]]:
        """Point-in-time list of (name, metric) pairs in registration order"""
        with self._lock:
            return list(self._metrics.items())

    def names(self) -> List[str]:
        with self._lock:
            return list(self._metrics.keys())

    def __len__(self) -> int:
        return len(self._metrics)

    def __contains__(self, name: str) -> bool:
        return name in self._metrics
