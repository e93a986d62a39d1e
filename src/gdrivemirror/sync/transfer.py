"""Streamed content transfer with inline exponential backoff."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

import aiofiles

from gdrivemirror.errors import GDriveMirrorError, is_transient
from gdrivemirror.log import get_logger
from gdrivemirror.remote import RemoteDriveApi
from gdrivemirror.throttle import TokenBucketRateLimiter

from .events import EventBus, EventName

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt budget shared by inline transfers and the retry queue.

    Attempt ``n`` (0-based) that fails is followed by a wait of
    ``initial_delay_sec * 2**n`` seconds, until ``max_attempts`` attempts
    have been made.
    """

    max_attempts: int = 3
    initial_delay_sec: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_delay_sec < 0:
            raise ValueError("initial_delay_sec must be >= 0")

    def delay_for(self, attempt: int) -> float:
        return self.initial_delay_sec * (2 ** attempt)


class Transfer:
    """Copy a remote object's bytes to a local path, retrying transient failures."""

    def __init__(
        self,
        api: RemoteDriveApi,
        rate_limiter: TokenBucketRateLimiter,
        *,
        policy: Optional[RetryPolicy] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        self._api = api
        self._rate_limiter = rate_limiter
        self.policy = policy or RetryPolicy()
        self._events = events or EventBus()

    async def transfer(
        self,
        file_id: str,
        destination: str,
        attempt: int = 0,
        *,
        report: bool = True,
    ) -> int:
        """
        Stream ``file_id`` into ``destination`` and return the bytes written.

        ``file_retry`` is emitted per scheduled retry when ``report`` is set.
        Exhaustion is only logged; the caller reports the failure.

        Raises:
            The last failure once ``max_attempts`` attempts are used up, or
            the first non-transient failure (auth, permission, not found).
        """
        while True:
            try:
                return await self._transfer_once(file_id, destination)
            except (GDriveMirrorError, OSError) as exc:
                if not is_transient(exc):
                    raise

                if attempt + 1 >= self.policy.max_attempts:
                    logger.error(
                        "transfer_failed",
                        file_id=file_id,
                        path=destination,
                        attempts=attempt + 1,
                        error=str(exc),
                    )
                    raise

                delay = self.policy.delay_for(attempt)
                logger.warning(
                    "transfer_retry",
                    file_id=file_id,
                    path=destination,
                    attempt=attempt + 1,
                    max_attempts=self.policy.max_attempts,
                    delay_seconds=delay,
                    error=str(exc),
                )
                if report:
                    self._events.emit(
                        EventName.FILE_RETRY,
                        file_id=file_id,
                        file_path=destination,
                        retry_count=attempt,
                        delay=delay,
                    )
                await asyncio.sleep(delay)
                attempt += 1

    async def _transfer_once(self, file_id: str, destination: str) -> int:
        await self._rate_limiter.acquire()

        written = 0
        async with aiofiles.open(destination, "wb") as f:
            async for chunk in self._api.iter_content(file_id):
                await f.write(chunk)
                written += len(chunk)
        return written
