"""Runtime sampler: copies process runtime statistics into the registry once per tick"""
from typing import Dict

import psutil

from .collectors.runtime import GCMonitor, RuntimeStats, RuntimeStatsCollector
from .logging_config import get_logger
from .metrics.models import Gauge, GaugeFloat64, Histogram
from .metrics.registry import Registry
from .utils.ticker import Ticker


logger = get_logger(__name__)

# registry name -> RuntimeStats attribute, for every integer gauge
RUNTIME_GAUGES: Dict[str, str] = {
    "runtime.mem.alloc": "alloc",
    "runtime.mem.total-alloc": "total_alloc",
    "runtime.mem.sys": "sys",
    "runtime.mem.heap.alloc": "heap_alloc",
    "runtime.mem.heap.sys": "heap_sys",
    "runtime.mem.heap.inuse": "heap_inuse",
    "runtime.mem.heap.idle": "heap_idle",
    "runtime.mem.heap.released": "heap_released",
    "runtime.mem.heap.objects": "heap_objects",
    "runtime.mem.stack.sys": "stack_sys",
    "runtime.mem.stack.inuse": "stack_inuse",
    "runtime.mem.gc.pause-total": "pause_total_ns",
    "runtime.mem.gc.num-gc": "num_gc",
    "runtime.goroutines": "num_threads",
    "runtime.cgo-calls": "num_native_calls",
}
GC_CPU_FRACTION = "runtime.mem.gc.cpu-fraction"
GC_DURATION = "runtime.mem.gc.duration"


class RuntimeSampler:
    """Background loop feeding runtime statistics into registry gauges.

    Collector pauses are ingested monotonically: the sampler remembers how
    many collections it has already seen and, on each tick, reads only the
    newly completed ones from the circular pause buffer. When more
    collections than the buffer holds complete within one tick, the oldest
    of them are lost.
    """

    def __init__(self, registry: Registry, collector: RuntimeStatsCollector = None, interval: float = 1.0):
        self.registry = registry
        self.collector = collector or RuntimeStatsCollector(GCMonitor())
        self._ticker = Ticker(interval, self.sample_once, name="runtime_sampler")
        self.last_observed_gc = 0
        self.samples_taken = 0
        self.sample_errors = 0

        self._gauges: Dict[str, Gauge] = {
            name: registry.get_or_register_gauge(name) for name in RUNTIME_GAUGES
        }
        self._gc_cpu_fraction: GaugeFloat64 = registry.get_or_register_gauge_float64(GC_CPU_FRACTION)
        self._gc_duration: Histogram = registry.get_or_register_histogram(GC_DURATION)

    @property
    def running(self) -> bool:
        return self._ticker.running

    @property
    def interval(self) -> float:
        return self._ticker.interval

    def start(self) -> None:
        self.collector.gc_monitor.install()
        self._ticker.start()

    async def stop(self) -> None:
        await self._ticker.stop()
        self.collector.gc_monitor.uninstall()
        self.collector.cleanup()

    async def sample_once(self) -> None:
        try:
            stats = await self.collector.collect_async()
        except (psutil.Error, OSError) as e:
            self.sample_errors += 1
            logger.warning("Runtime statistics read failed, skipping tick",
                           error=str(e), error_type=type(e).__name__, event_type="runtime_sample_error")
            return
        self.update(stats)

    def update(self, stats: RuntimeStats) -> None:
        """Write one statistics read into the registry"""
        for name, attr in RUNTIME_GAUGES.items():
            self._gauges[name].update(int(getattr(stats, attr)))
        self._gc_cpu_fraction.update(float(stats.gc_cpu_fraction))
        self.ingest_gc_pauses(stats)
        self.samples_taken += 1

    def ingest_gc_pauses(self, stats: RuntimeStats) -> int:
        """Feed pauses of collections completed since the last call into the duration histogram"""
        capacity = len(stats.pause_ns)
        first = max(self.last_observed_gc, stats.num_gc - capacity)
        for cycle in range(first, stats.num_gc):
            self._gc_duration.update(stats.pause_ns[cycle % capacity])
        ingested = max(stats.num_gc - first, 0)
        self.last_observed_gc = max(self.last_observed_gc, stats.num_gc)
        return ingested
