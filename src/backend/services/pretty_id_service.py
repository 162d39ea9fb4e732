"""
Pretty ID allocator.

Hands out story pretty IDs 1, 2, 3, ... from a single counter document.
The increment itself is atomic in Cosmos, but creating the counter on first
use is not, so every request goes through one queue drained by one worker
task and no two allocations ever overlap.
"""

import asyncio
from typing import Optional

import structlog

from core.errors import ServerError
from repositories.provider import CounterRepositoryProtocol

logger = structlog.get_logger(__name__)


class PrettyIdAllocator:
    """Single-writer owner of the story pretty ID counter."""

    def __init__(self, counter: CounterRepositoryProtocol):
        self.counter = counter
        self._queue: asyncio.Queue[asyncio.Future[int]] = asyncio.Queue()
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the worker if it isn't running already."""
        if not self.running:
            logger.info("pretty_id_allocator_starting")
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the worker and fail anything still waiting in the queue."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

        while not self._queue.empty():
            future = self._queue.get_nowait()
            if not future.done():
                future.set_exception(ServerError(cause=RuntimeError("pretty ID allocator stopped")))
            self._queue.task_done()
        logger.info("pretty_id_allocator_stopped")

    async def next(self) -> int:
        """Wait for the next pretty ID."""
        if not self.running:
            raise ServerError(cause=RuntimeError("pretty ID allocator is not running"))
        future: asyncio.Future[int] = asyncio.get_running_loop().create_future()
        await self._queue.put(future)
        return await future

    async def _run(self) -> None:
        while True:
            future = await self._queue.get()
            try:
                if future.cancelled():
                    continue
                try:
                    pretty_id = await self._allocate()
                except asyncio.CancelledError:
                    if not future.done():
                        future.set_exception(ServerError(cause=RuntimeError("pretty ID allocator stopped")))
                    raise
                except Exception as e:
                    if not future.done():
                        future.set_exception(e)
                    continue
                if future.done():
                    # The caller went away after the counter moved
                    logger.warning("pretty_id_abandoned", pretty_id=pretty_id)
                else:
                    future.set_result(pretty_id)
            finally:
                self._queue.task_done()

    async def _allocate(self) -> int:
        pretty_id = await self.counter.increment()
        if pretty_id is None:
            # First allocation ever: the next caller gets 2
            await self.counter.create(2)
            pretty_id = 1

        if not isinstance(pretty_id, int) or pretty_id < 1:
            raise ServerError(cause=RuntimeError(f"counter held an invalid value: {pretty_id!r}"))

        logger.info("pretty_id_allocated", pretty_id=pretty_id)
        return pretty_id
