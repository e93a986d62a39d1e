"""Token-bucket throttle shared by every Drive API call."""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional

from gdrivemirror.log import get_logger

logger = get_logger(__name__)

DEFAULT_REQUESTS_PER_SECOND = 100
DEFAULT_BURST_SIZE = 200


class TokenBucketRateLimiter:
    """
    Token bucket refilled lazily from elapsed wall-clock time.

    - ``capacity`` tokens per second accrue continuously, capped at
      ``capacity`` so an idle period never builds an unbounded burst.
    - Refill happens inside ``acquire()``; there is no background timer.
    - Waiting is an ``asyncio.sleep``, so a throttled caller suspends instead
      of holding a thread.

    Instances are not shared implicitly: build one per mirror (or per test)
    and hand it to every component that talks to Drive.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_REQUESTS_PER_SECOND,
        *,
        burst_size: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if burst_size is not None and burst_size <= 0:
            raise ValueError("burst_size must be positive")

        self.capacity = capacity
        # A burst never exceeds what the bucket can hold.
        self.burst_size = min(burst_size, capacity) if burst_size is not None else capacity
        self._clock = clock
        self._tokens = float(capacity)
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    @property
    def available_tokens(self) -> float:
        """Tokens available right now (refills before answering)."""
        self._refill()
        return self._tokens

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it."""
        async with self._lock:
            while True:
                self._refill()
                if self._tokens >= 1:
                    self._tokens -= 1
                    return

                wait = (1 - self._tokens) / self.capacity
                logger.debug("rate_limiter_waiting", wait_seconds=round(wait, 4))
                await asyncio.sleep(wait)

    async def acquire_burst(self, count: int) -> None:
        """Acquire ``min(count, burst_size, capacity)`` tokens one after another."""
        for _ in range(min(count, self.burst_size)):
            await self.acquire()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed <= 0:
            return
        self._tokens = min(float(self.capacity), self._tokens + elapsed * self.capacity)
        self._last_refill = now
