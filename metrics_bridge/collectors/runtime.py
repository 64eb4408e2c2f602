"""Process runtime statistics: memory, threads and garbage collector pauses"""
import gc
import sys
import threading
import time
import tracemalloc
from dataclasses import dataclass, field
from typing import Callable, List, Tuple

import psutil

from .base import BaseCollector

PAUSE_BUFFER_SIZE = 256
DEFAULT_THREAD_STACK_SIZE = 8 * 1024 * 1024


@dataclass
class RuntimeStats:
    """One consistent read of the process runtime statistics.

    Collector pauses live in a circular buffer: the pause of the collection
    with 0-based cycle index ``k`` is stored at ``pause_ns[k % len(pause_ns)]``
    and ``num_gc`` is the number of completed collections.
    """
    alloc: int = 0
    total_alloc: int = 0
    sys: int = 0
    heap_alloc: int = 0
    heap_sys: int = 0
    heap_inuse: int = 0
    heap_idle: int = 0
    heap_released: int = 0
    heap_objects: int = 0
    stack_sys: int = 0
    stack_inuse: int = 0
    pause_total_ns: int = 0
    pause_ns: List[int] = field(default_factory=lambda: [0] * PAUSE_BUFFER_SIZE)
    num_gc: int = 0
    gc_cpu_fraction: float = 0.0
    num_threads: int = 0
    num_native_calls: int = 0


class GCMonitor:
    """Times every garbage collection through ``gc.callbacks``"""

    def __init__(self, capacity: int = PAUSE_BUFFER_SIZE,
                 clock: Callable[[], int] = time.perf_counter_ns):
        self.capacity = capacity
        self._clock = clock
        # re-entrant: a collection can fire the callback inside read() on the same thread
        self._lock = threading.RLock()
        self._pause_ns = [0] * capacity
        self._num_gc = 0
        self._pause_total_ns = 0
        self._started_at = None
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        if not self._installed:
            gc.callbacks.append(self._on_gc)
            self._installed = True

    def uninstall(self) -> None:
        if self._installed:
            try:
                gc.callbacks.remove(self._on_gc)
            except ValueError:
                pass
            self._installed = False
            self._started_at = None

    def _on_gc(self, phase: str, info: dict) -> None:
        if phase == "start":
            self._started_at = self._clock()
        elif phase == "stop" and self._started_at is not None:
            self.record_pause(self._clock() - self._started_at)
            self._started_at = None

    def record_pause(self, pause_ns: int) -> None:
        with self._lock:
            self._pause_ns[self._num_gc % self.capacity] = pause_ns
            self._num_gc += 1
            self._pause_total_ns += pause_ns

    def read(self) -> Tuple[int, int, List[int]]:
        """Return (num_gc, pause_total_ns, copy of the pause buffer)"""
        with self._lock:
            return self._num_gc, self._pause_total_ns, list(self._pause_ns)


class RuntimeStatsCollector(BaseCollector):
    """Read memory, thread and collector statistics of the current process"""

    def __init__(self, gc_monitor: GCMonitor = None, process: psutil.Process = None):
        super().__init__("runtime", "Process runtime statistics")
        self.gc_monitor = gc_monitor or GCMonitor()
        self._process = process or psutil.Process()
        self._peak_alloc = 0

    def collect(self) -> RuntimeStats:
        with self._process.oneshot():
            mem = self._process.memory_info()
            cpu = self._process.cpu_times()
            os_threads = self._process.num_threads()
            ctx = self._process.num_ctx_switches()

        shared = getattr(mem, "shared", 0)
        heap_inuse = max(mem.rss - shared, 0)
        if tracemalloc.is_tracing():
            alloc = tracemalloc.get_traced_memory()[0]
        else:
            alloc = heap_inuse
        self._peak_alloc = max(self._peak_alloc, alloc)

        # data segment is only reported on some platforms
        heap_sys = getattr(mem, "data", mem.vms)
        stack_size = threading.stack_size() or DEFAULT_THREAD_STACK_SIZE
        py_threads = threading.active_count()

        num_gc, pause_total_ns, pause_ns = self.gc_monitor.read()
        cpu_seconds = cpu.user + cpu.system
        if cpu_seconds > 0:
            gc_cpu_fraction = min(max(pause_total_ns / 1e9 / cpu_seconds, 0.0), 1.0)
        else:
            gc_cpu_fraction = 0.0

        return RuntimeStats(
            alloc=alloc,
            total_alloc=self._peak_alloc,
            sys=mem.vms,
            heap_alloc=alloc,
            heap_sys=heap_sys,
            heap_inuse=heap_inuse,
            heap_idle=max(heap_sys - heap_inuse, 0),
            heap_released=max(mem.vms - mem.rss, 0),
            heap_objects=sys.getallocatedblocks(),
            stack_sys=os_threads * stack_size,
            stack_inuse=py_threads * stack_size,
            pause_total_ns=pause_total_ns,
            pause_ns=pause_ns,
            num_gc=num_gc,
            gc_cpu_fraction=gc_cpu_fraction,
            num_threads=py_threads,
            num_native_calls=ctx.voluntary + ctx.involuntary,
        )
