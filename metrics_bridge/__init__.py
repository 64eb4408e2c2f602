"""Process-local metrics bridge: samples a registry and delivers flat JSON snapshots"""
from .bridge import MetricsBridge, resolve_hostname
from .errors import (
    BridgeError,
    DuplicateMetricError,
    HostnameResolutionError,
    MetricKindMismatchError,
    SnapshotEncodingError,
)
from .metrics.models import (
    Counter,
    Gauge,
    GaugeFloat64,
    Histogram,
    MetricKind,
    SnapshotRecord,
    Timer,
)
from .metrics.registry import Registry
from .metrics.serializer import encode_records, serialize

__all__ = [
    "BridgeError",
    "Counter",
    "DuplicateMetricError",
    "Gauge",
    "GaugeFloat64",
    "Histogram",
    "HostnameResolutionError",
    "MetricKind",
    "MetricKindMismatchError",
    "MetricsBridge",
    "Registry",
    "SnapshotEncodingError",
    "SnapshotRecord",
    "Timer",
    "encode_records",
    "resolve_hostname",
    "serialize",
]
