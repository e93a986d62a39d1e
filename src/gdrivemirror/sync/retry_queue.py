"""Background FIFO that re-attempts failed downloads."""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Optional

from gdrivemirror.log import get_logger

from .events import EventBus, EventName

logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class RetryQueueItem:
    file_id: str
    target_path: str
    attempt_count: int = 0


RetryHandler = Callable[[RetryQueueItem], Awaitable[Any]]


class RetryQueue:
    """
    Single-consumer retry queue.

    ``enqueue`` appends and starts a drain task when none is running. The
    drain task retries the head item; a failure sends it to the tail with
    ``attempt_count + 1`` until ``max_attempts`` is reached, after which the
    item is dropped and logged. The task exits when the queue is empty.

    Delivery is best-effort: items still pending when the process exits are
    lost.
    """

    def __init__(
        self,
        handler: RetryHandler,
        *,
        max_attempts: int = 3,
        events: Optional[EventBus] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._handler = handler
        self.max_attempts = max_attempts
        self._events = events or EventBus()
        self._items: deque[RetryQueueItem] = deque()
        self._task: Optional[asyncio.Task[None]] = None
        self.exhausted = 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def pending(self) -> list[RetryQueueItem]:
        return list(self._items)

    @property
    def is_draining(self) -> bool:
        return self._task is not None and not self._task.done()

    def enqueue(self, item: RetryQueueItem) -> None:
        self._items.append(item)
        logger.info(
            "retry_enqueued",
            file_id=item.file_id,
            path=item.target_path,
            attempt_count=item.attempt_count,
        )
        self._events.emit(
            EventName.RETRY_ENQUEUED,
            file_id=item.file_id,
            file_path=item.target_path,
            retry_count=item.attempt_count,
        )

        if not self.is_draining:
            self._task = asyncio.get_running_loop().create_task(self._drain())

    async def join(self) -> None:
        """Wait until the queue is empty and no drain task is running."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    def cancel(self) -> int:
        """Stop draining and drop pending items. Returns how many were dropped."""
        dropped = len(self._items)
        self._items.clear()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        if dropped:
            logger.warning("retry_queue_dropped", count=dropped)
        return dropped

    async def _drain(self) -> None:
        while self._items:
            item = self._items.popleft()
            try:
                await self._handler(item)
            except Exception as exc:
                self._on_failure(item, exc)
                continue

            logger.info("retry_succeeded", file_id=item.file_id, path=item.target_path)
            self._events.emit(
                EventName.RETRY_SUCCEEDED,
                file_id=item.file_id,
                file_path=item.target_path,
                retry_count=item.attempt_count,
            )

    def _on_failure(self, item: RetryQueueItem, exc: Exception) -> None:
        next_count = item.attempt_count + 1
        if next_count < self.max_attempts:
            logger.warning(
                "retry_requeued",
                file_id=item.file_id,
                attempt_count=next_count,
                error=str(exc),
            )
            self._items.append(replace(item, attempt_count=next_count))
            return

        self.exhausted += 1
        # The failure was already reported when the item was enqueued.
        logger.error(
            "retry_exhausted",
            file_id=item.file_id,
            path=item.target_path,
            attempts=next_count,
            error=str(exc),
        )
