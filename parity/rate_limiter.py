"""Fixed-interval request scheduling for a single API rate-limit tier."""

from __future__ import annotations

import asyncio
import enum
import logging
import math
import time
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Optional, Tuple, TypeVar

logger = logging.getLogger("parity")

T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[Any]]


class LimiterState(enum.Enum):
    IDLE = "idle"
    DRAINING = "draining"


class RateLimiter:
    """Serialize calls so that dispatches are at least ``60000 / rpm`` ms apart.

    Tasks are zero-argument coroutine functions. ``schedule`` queues the task and
    waits for its result; a single background drain task pops the queue in FIFO
    order, sleeps out the remaining interval since the previous dispatch, runs the
    task to completion and moves on. A task that raises only fails its own caller.

    When ``task_timeout`` (seconds) is set, a task that runs longer is cancelled
    and its caller gets ``asyncio.TimeoutError``; otherwise a hung task stalls the
    queue.
    """

    def __init__(
        self,
        requests_per_minute: float,
        *,
        task_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        name: str = "default",
    ) -> None:
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        self.requests_per_minute = requests_per_minute
        self.min_interval_ms = math.ceil(60_000 / requests_per_minute)
        self.task_timeout = task_timeout
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self._queue: Deque[Tuple[TaskFactory, asyncio.Future]] = deque()
        self._state = LimiterState.IDLE
        self._drain_task: Optional[asyncio.Task] = None
        self._last_dispatch: Optional[float] = None

    @property
    def min_interval(self) -> float:
        """Minimum gap between dispatches in seconds."""
        return self.min_interval_ms / 1000

    @property
    def state(self) -> LimiterState:
        return self._state

    @property
    def pending(self) -> int:
        return len(self._queue)

    async def schedule(self, task: Callable[[], Awaitable[T]]) -> T:
        """Queue ``task`` and return its result once the limiter has run it."""
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._queue.append((task, future))
        self._ensure_draining()
        return await future

    def _ensure_draining(self) -> None:
        if self._state is LimiterState.DRAINING:
            return
        self._state = LimiterState.DRAINING
        self._drain_task = asyncio.get_running_loop().create_task(self._drain())

    async def _wait_for_slot(self) -> None:
        if self._last_dispatch is None:
            return
        elapsed = self._clock() - self._last_dispatch
        remaining = self.min_interval - elapsed
        if remaining > 0:
            logger.debug(
                "Rate limiter %s waiting %.3fs before next request", self.name, remaining
            )
            await self._sleep(remaining)

    async def _run(self, task: TaskFactory) -> Any:
        if self.task_timeout is None:
            return await task()
        return await asyncio.wait_for(task(), self.task_timeout)

    async def _drain(self) -> None:
        try:
            while self._queue:
                task, future = self._queue.popleft()
                if future.done():
                    # Caller gave up before dispatch.
                    continue
                await self._wait_for_slot()
                self._last_dispatch = self._clock()
                try:
                    result = await self._run(task)
                except Exception as exc:  # propagated to the caller through its future
                    if not future.done():
                        future.set_exception(exc)
                else:
                    if not future.done():
                        future.set_result(result)
        finally:
            self._state = LimiterState.IDLE
            self._drain_task = None
