"""
application.inflight - Coalesce concurrent calls into one in-flight task.

Several screens mounting at once all call refresh() on the same cache.
Only the first call starts a round trip; later callers await the same
task and receive its result (or its exception).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


class SingleFlight(Generic[T]):
    """At most one running task at a time; concurrent callers share it."""

    def __init__(self, name: str = ""):
        self._name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, factory: Callable[[], Awaitable[T]], fresh: bool = False) -> T:
        """Run factory(), or join the task already running.

        With fresh=True a running task is not joined: its outcome is
        awaited (and left to its own callers), then a new task starts,
        unless another caller has already started one in the meantime.
        """
        if fresh and self.in_flight:
            logger.debug("Waiting out in-flight %s before a fresh run", self._name or "task")
            await asyncio.wait({self._task})
        if self.in_flight:
            logger.debug("Joining in-flight %s", self._name or "task")
        else:
            self._task = asyncio.ensure_future(factory())
        # shield: a cancelled waiter must not cancel the shared round trip
        return await asyncio.shield(self._task)


class KeyedSingleFlight(Generic[K, T]):
    """SingleFlight per key (e.g. one fetch per recipe id)."""

    def __init__(self, name: str = ""):
        self._name = name
        self._tasks: dict[K, asyncio.Task] = {}

    def in_flight(self, key: K) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def run(self, key: K, factory: Callable[[], Awaitable[T]]) -> T:
        task = self._tasks.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            logger.debug("Joining in-flight %s for %r", self._name or "task", key)
        return await asyncio.shield(task)

    def _forget(self, key: K, task: asyncio.Task) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
