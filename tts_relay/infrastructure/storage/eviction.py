"""
Eviction Scheduler

Per-key deferred removal of cache entries on the running event loop.
"""

import asyncio
from typing import Callable, Dict

import structlog

from ...domain.cache.value_objects import CacheKey, EvictionOutcome
from ...monitoring import metrics

logger = structlog.get_logger(__name__)


class EvictionScheduler:
    """
    Keeps one eviction timer per cache key.

    Scheduling a key that already has a pending timer replaces that timer,
    so an old timer can never remove a freshly written file. Reads do not
    touch timers.
    """

    def __init__(self, evict: Callable[[CacheKey], EvictionOutcome]):
        """
        Initialize scheduler.

        Args:
            evict: Synchronous removal callback; must not raise
        """
        self._evict = evict
        self._handles: Dict[CacheKey, asyncio.TimerHandle] = {}

    @property
    def pending(self) -> int:
        """Number of scheduled evictions."""
        return len(self._handles)

    def is_scheduled(self, key: CacheKey) -> bool:
        return key in self._handles

    def schedule(self, key: CacheKey, delay_seconds: float) -> None:
        """
        Arrange removal of ``key`` after ``delay_seconds``.

        Must be called from within the event loop.
        """
        loop = asyncio.get_running_loop()

        previous = self._handles.pop(key, None)
        if previous is not None:
            previous.cancel()
            logger.debug("Replaced pending eviction", key=str(key))

        self._handles[key] = loop.call_later(delay_seconds, self._fire, key)
        metrics.pending_evictions.set(len(self._handles))
        logger.debug("Eviction scheduled", key=str(key), delay_seconds=delay_seconds)

    def cancel(self, key: CacheKey) -> bool:
        """Cancel the pending eviction for ``key`` without removing the file."""
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        metrics.pending_evictions.set(len(self._handles))
        return True

    def shutdown(self, evict_pending: bool = True) -> int:
        """
        Cancel every pending timer.

        Args:
            evict_pending: Remove the affected entries right away

        Returns:
            Number of timers that were pending
        """
        handles, self._handles = self._handles, {}
        for key, handle in handles.items():
            handle.cancel()
            if evict_pending:
                self._evict(key)
        metrics.pending_evictions.set(0)

        if handles:
            logger.info(
                "Eviction scheduler stopped",
                cancelled=len(handles),
                evicted=evict_pending,
            )
        return len(handles)

    def _fire(self, key: CacheKey) -> None:
        self._handles.pop(key, None)
        metrics.pending_evictions.set(len(self._handles))
        self._evict(key)
