"""
In-flight request registry.

Collapses concurrent work for the same key onto a single task.
"""

import asyncio
from typing import Awaitable, Callable, Dict, Hashable, Tuple, TypeVar

T = TypeVar("T")


class InFlightRegistry:
    """
    Maps a key to the task currently producing its result.

    The shared task is detached from its callers: a caller that goes away
    does not cancel work other callers are waiting on.
    """

    def __init__(self) -> None:
        self._pending: Dict[Hashable, "asyncio.Task"] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._pending

    async def run(
        self, key: Hashable, factory: Callable[[], Awaitable[T]]
    ) -> Tuple[T, bool]:
        """
        Await the shared result for ``key``, starting it if nobody has.

        Returns:
            Tuple of (result, joined) where ``joined`` is True when the
            caller attached to work started by someone else
        """
        task = self._pending.get(key)
        joined = task is not None
        if task is None:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            task.add_done_callback(lambda t: self._release(key, t))

        result = await asyncio.shield(task)
        return result, joined

    async def close(self) -> None:
        """Cancel outstanding work and wait for it to settle."""
        tasks = list(self._pending.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._pending.clear()

    def _release(self, key: Hashable, task: "asyncio.Task") -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Mark the exception as retrieved when every waiter has gone away
        if not task.cancelled():
            task.exception()
