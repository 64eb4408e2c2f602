"""Base exporter interface"""
import abc
from typing import List, Optional

from ..metrics.models import SnapshotRecord


class BaseExporter(abc.ABC):
    """Abstract base class for snapshot exporters"""

    @abc.abstractmethod
    async def start(self) -> None:
        """Initialize the exporter"""
        pass

    @abc.abstractmethod
    async def export_metrics(self, records: List[SnapshotRecord]) -> Optional[int]:
        """Export one snapshot using this exporter"""
        pass

    @abc.abstractmethod
    async def shutdown(self) -> None:
        """Cleanup the exporter"""
        pass

    @abc.abstractmethod
    def is_healthy(self) -> bool:
        """Check if exporter is healthy"""
        pass
