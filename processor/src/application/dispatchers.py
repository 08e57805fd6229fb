"""Dispatch strategies used by the intake loop to run jobs."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[None]]


class Dispatcher(Protocol):
    """Runs message jobs. ``submit`` may block to apply backpressure."""

    async def submit(self, job: Job) -> None: ...

    async def drain(self) -> None: ...


class SequentialDispatcher:
    """Runs each job inline, so at most one message is in flight."""

    async def submit(self, job: Job) -> None:
        await job()

    async def drain(self) -> None:
        return None


class BoundedDispatcher:
    """Runs up to *concurrency* jobs as asyncio tasks.

    ``submit`` waits for a free slot before scheduling, so the intake loop
    never holds more received messages than it can work on.
    """

    def __init__(self, concurrency: int) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._concurrency = concurrency
        self._semaphore = asyncio.Semaphore(concurrency)
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def submit(self, job: Job) -> None:
        await self._semaphore.acquire()
        task = asyncio.get_running_loop().create_task(self._run(job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, job: Job) -> None:
        try:
            await job()
        except Exception:
            logger.exception("Dispatched job failed")
        finally:
            self._semaphore.release()

    async def drain(self) -> None:
        """Wait for every in-flight job to finish."""
        if self._tasks:
            logger.info("Waiting for %d in-flight job(s) to finish", len(self._tasks))
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
