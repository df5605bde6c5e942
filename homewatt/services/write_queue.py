"""Background writer that decouples simulation cadence from storage latency."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.sql import Executable

from homewatt import database
from homewatt.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class WriteBatch:
    """Statements and rows committed together in one transaction.

    Rows are kept as (model, values) pairs so every retry builds fresh ORM
    instances.
    """

    label: str
    inserts: list[tuple[type, dict[str, Any]]] = field(default_factory=list)
    statements: list[Executable] = field(default_factory=list)

    def add(self, model: type, **values: Any) -> None:
        self.inserts.append((model, values))

    def __bool__(self) -> bool:
        return bool(self.inserts or self.statements)


class WriteQueue:
    """Bounded queue drained by a single worker with retry and backoff."""

    def __init__(
        self,
        maxsize: int | None = None,
        max_retries: int | None = None,
        base_delay: float | None = None,
        session_maker=None,
    ):
        settings = get_settings()
        self._queue: asyncio.Queue[WriteBatch] = asyncio.Queue(
            maxsize=maxsize if maxsize is not None else settings.write_queue_size
        )
        self.max_retries = max_retries if max_retries is not None else settings.write_max_retries
        self.base_delay = base_delay if base_delay is not None else settings.write_retry_base_delay
        self._session_maker = session_maker
        self._running = False
        self._task: asyncio.Task | None = None
        self.written = 0
        self.dropped = 0

    @property
    def session_maker(self):
        return self._session_maker or database.async_session_maker

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        """Start the writer task."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._drain_loop())
        logger.info("Started write queue worker")

    async def stop(self) -> None:
        """Stop the writer task. Batches still queued are abandoned."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self.pending:
            logger.warning(f"Write queue stopped with {self.pending} batches pending")
        logger.info("Stopped write queue worker")

    def enqueue(self, batch: WriteBatch) -> bool:
        """Hand a batch to the worker. Returns False when the queue is full."""
        if not batch:
            return True
        try:
            self._queue.put_nowait(batch)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Write queue full, dropping {batch.label} batch")
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued batch has been handled."""
        await self._queue.join()

    async def _drain_loop(self) -> None:
        while self._running:
            batch = await self._queue.get()
            try:
                await self.write(batch)
            finally:
                self._queue.task_done()

    async def write(self, batch: WriteBatch) -> bool:
        """Commit a batch, retrying with exponential backoff. Never raises."""
        for attempt in range(self.max_retries + 1):
            try:
                async with self.session_maker() as db:
                    for statement in batch.statements:
                        await db.execute(statement)
                    db.add_all([model(**values) for model, values in batch.inserts])
                    await db.commit()
                self.written += 1
                return True
            except Exception as e:
                if attempt >= self.max_retries:
                    self.dropped += 1
                    logger.error(
                        f"Failed to write {batch.label} batch after {attempt + 1} attempts: {e}"
                    )
                    return False
                delay = self.base_delay * (2**attempt)
                logger.warning(
                    f"Write of {batch.label} batch failed (attempt {attempt + 1}), "
                    f"retrying in {delay:.1f}s: {e}"
                )
                await asyncio.sleep(delay)
        return False


# Global write queue instance
write_queue = WriteQueue()
