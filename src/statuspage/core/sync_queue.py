"""Serialized replication queue.

Every task that mutates the remote store goes through one FIFO queue with a
single consumer, so at most one remote operation is in flight and remote
writes happen in the order local writes were made.
"""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import Any

from src.statuspage.core.logging import get_logger

logger = get_logger(__name__)

SyncTask = Callable[[], Awaitable[Any]]


class SyncQueue:
    """Single-consumer FIFO of replication tasks.

    A failing task is logged and dropped; it never reaches the code that
    enqueued it and never stops the tasks queued behind it.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._queue: asyncio.Queue[tuple[str, SyncTask]] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._pending = 0
        self.completed_count = 0
        self.failed_count = 0

    @property
    def pending_count(self) -> int:
        """Tasks queued or in flight."""
        return self._pending

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def enqueue(self, task: SyncTask, name: str = "sync") -> bool:
        """Queue a task behind everything already queued. Never blocks.

        Returns False (and drops the task) when replication is disabled.
        """
        if not self.enabled:
            return False
        self._queue.put_nowait((name, task))
        self._pending += 1
        logger.debug("Replication task queued", task=name, pending=self.pending_count)
        return True

    def start(self) -> None:
        """Start the consumer on the running event loop. Safe to call twice."""
        if self.is_running:
            return
        self._worker = asyncio.create_task(self._run(), name="sync-queue-worker")
        logger.info("Replication queue started")

    async def _run(self) -> None:
        while True:
            name, task = await self._queue.get()
            try:
                await task()
                self.completed_count += 1
            except Exception as e:
                self.failed_count += 1
                logger.exception("Replication task failed", task=name, error=str(e))
            finally:
                self._pending -= 1
                self._queue.task_done()

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait until every task queued so far has finished.

        Returns:
            True if the queue drained, False on timeout.
        """
        if self.pending_count and not self.is_running:
            logger.warning("Draining a replication queue with no worker", pending=self.pending_count)
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
            return True
        except TimeoutError:
            logger.warning(
                f"Replication queue did not drain within {timeout}s",
                pending=self.pending_count,
            )
            return False

    async def stop(self) -> None:
        """Cancel the consumer. Tasks still queued are abandoned."""
        if self._worker is None:
            return
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None
        logger.info("Replication queue stopped", abandoned=self.pending_count)
