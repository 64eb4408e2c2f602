"""Flattening of the registry into snapshot records and their wire encoding"""
import json
import math
import time
from typing import Callable, Dict, List, Sequence, Tuple

from ..errors import SnapshotEncodingError
from ..logging_config import get_logger
from .models import MetricKind, Number, SnapshotRecord


logger = get_logger(__name__)

PERCENTILES: Sequence[Tuple[float, str]] = (
    (0.5, "50-percentile"),
    (0.75, "75-percentile"),
    (0.95, "95-percentile"),
    (0.99, "99-percentile"),
    (0.999, "999-percentile"),
)

# floats this large are written in exponent form, so they are left alone
_INTEGRAL_FLOAT_LIMIT = 1e21


def _expand_counter(name: str, snapshot) -> List[Tuple[str, Number]]:
    return [(name, snapshot.value)]


def _expand_gauge(name: str, snapshot) -> List[Tuple[str, Number]]:
    return [(name, snapshot.value)]


def _expand_distribution(name: str, snapshot) -> List[Tuple[str, Number]]:
    return [
        (f"{name}.count", snapshot.count()),
        (f"{name}.min", snapshot.min()),
        (f"{name}.max", snapshot.max()),
        (f"{name}.mean", snapshot.mean()),
        (f"{name}.std-dev", snapshot.std_dev()),
    ]


def _expand_percentiles(name: str, snapshot) -> List[Tuple[str, Number]]:
    scores = snapshot.percentiles([q for q, _ in PERCENTILES])
    return [(f"{name}.{suffix}", score) for (_, suffix), score in zip(PERCENTILES, scores)]


def _expand_histogram(name: str, snapshot) -> List[Tuple[str, Number]]:
    return _expand_distribution(name, snapshot) + _expand_percentiles(name, snapshot)


def _expand_timer(name: str, snapshot) -> List[Tuple[str, Number]]:
    rates = [
        (f"{name}.one-minute", snapshot.rate1()),
        (f"{name}.five-minute", snapshot.rate5()),
        (f"{name}.fifteen-minute", snapshot.rate15()),
        (f"{name}.mean-rate", snapshot.rate_mean()),
    ]
    return _expand_distribution(name, snapshot) + rates + _expand_percentiles(name, snapshot)


EXPANDERS: Dict[MetricKind, Callable[[str, object], List[Tuple[str, Number]]]] = {
    MetricKind.COUNTER: _expand_counter,
    MetricKind.GAUGE: _expand_gauge,
    MetricKind.GAUGE_FLOAT64: _expand_gauge,
    MetricKind.TIMER: _expand_timer,
    MetricKind.HISTOGRAM: _expand_histogram,
}


def serialize(registry, prefix: str, hostname: str,
              clock: Callable[[], float] = time.time) -> List[SnapshotRecord]:
    """Flatten every metric in ``registry`` into snapshot records.

    Reads only; the registry is never mutated. Metrics whose kind has no
    expansion are skipped. One timestamp is taken per call and shared by all
    records. If two expansions produce the same metric name the first one
    wins.
    """
    pairs: List[Tuple[str, Number]] = []
    for name, metric in registry.each():
        expand = EXPANDERS.get(getattr(metric, "kind", None))
        if expand is None:
            continue
        pairs.extend(expand(name, metric.snapshot()))

    now = int(clock())
    records = []
    seen = set()
    for name, value in pairs:
        full_name = f"{prefix}.{name}"
        if full_name in seen:
            logger.warning("Duplicate metric name in snapshot, dropping", metric=full_name,
                           event_type="snapshot_duplicate")
            continue
        seen.add(full_name)
        records.append(SnapshotRecord(timestamp=now, metric=full_name, value=value, hostname=hostname))
    return records


def _wire_number(value: Number) -> Number:
    if isinstance(value, float) and math.isfinite(value) and value.is_integer() \
            and abs(value) < _INTEGRAL_FLOAT_LIMIT:
        return int(value)
    return value


def encode_records(records: Sequence[SnapshotRecord]) -> str:
    """Encode records as the compact JSON array collectors expect.

    Raises:
        SnapshotEncodingError: a value is NaN, infinite or not a number.
    """
    payload = []
    for record in records:
        item = record.to_dict()
        item["value"] = _wire_number(record.value)
        payload.append(item)
    try:
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SnapshotEncodingError(str(e)) from e
