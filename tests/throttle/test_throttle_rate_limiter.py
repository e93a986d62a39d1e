import time
import unittest
from unittest.mock import AsyncMock, patch

from gdrivemirror.throttle import TokenBucketRateLimiter


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestTokenBucketRateLimiter(unittest.IsolatedAsyncioTestCase):
    def test_rejects_non_positive_capacity(self) -> None:
        with self.assertRaises(ValueError):
            TokenBucketRateLimiter(0)
        with self.assertRaises(ValueError):
            TokenBucketRateLimiter(10, burst_size=0)

    async def test_starts_full_and_consumes(self) -> None:
        clock = _Clock()
        limiter = TokenBucketRateLimiter(5, clock=clock)

        for _ in range(5):
            await limiter.acquire()

        self.assertLess(limiter.available_tokens, 1)

    async def test_waits_for_refill_when_empty(self) -> None:
        clock = _Clock()
        limiter = TokenBucketRateLimiter(20, clock=clock)
        slept: list[float] = []

        async def fake_sleep(delay: float) -> None:
            slept.append(delay)
            clock.now += delay

        for _ in range(20):
            await limiter.acquire()

        with patch("asyncio.sleep", side_effect=fake_sleep):
            for _ in range(4):
                await limiter.acquire()

        # Four tokens at 20/s need at least 0.2s of refill.
        self.assertGreaterEqual(sum(slept), 0.2 - 1e-9)
        self.assertLess(sum(slept), 0.21)

    async def test_refill_is_capped_at_capacity(self) -> None:
        clock = _Clock()
        limiter = TokenBucketRateLimiter(10, clock=clock)
        await limiter.acquire()

        clock.now += 60.0

        self.assertEqual(limiter.available_tokens, 10.0)

    async def test_acquire_burst_is_capped(self) -> None:
        clock = _Clock()
        limiter = TokenBucketRateLimiter(100, burst_size=5, clock=clock)

        await limiter.acquire_burst(50)

        self.assertEqual(limiter.available_tokens, 95.0)

    async def test_burst_larger_than_capacity_is_capped_at_capacity(self) -> None:
        clock = _Clock()
        limiter = TokenBucketRateLimiter(10, burst_size=200, clock=clock)

        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            await limiter.acquire_burst(50)

        self.assertEqual(limiter.burst_size, 10)
        self.assertEqual(limiter.available_tokens, 0.0)
        sleep.assert_not_called()

    async def test_real_clock_throttles(self) -> None:
        limiter = TokenBucketRateLimiter(20)
        for _ in range(20):
            await limiter.acquire()

        started = time.monotonic()
        for _ in range(4):
            await limiter.acquire()
        elapsed = time.monotonic() - started

        self.assertGreaterEqual(elapsed, 0.15)


if __name__ == "__main__":
    unittest.main()
