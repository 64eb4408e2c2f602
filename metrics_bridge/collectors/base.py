"""Base collector"""
import asyncio
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional


class BaseCollector(ABC):
    """Base class for collectors that read process state off the event loop"""

    def __init__(self, name: str = "", help_text: str = ""):
        self._name = name
        self._help_text = help_text
        self._executor: Optional[ThreadPoolExecutor] = None

    @abstractmethod
    def collect(self) -> Any:
        """Read and return the collector's current state"""
        pass

    async def collect_async(self) -> Any:
        """Async version of collect method"""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{self.name}_collector")
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(self._executor, self.collect)

    @property
    def name(self) -> str:
        return self._name

    @property
    def help_text(self) -> str:
        return self._help_text or f"{self.name} metrics collector"

    def cleanup(self):
        """Cleanup resources"""
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
