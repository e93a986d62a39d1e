from .rate_limiter import DEFAULT_BURST_SIZE, DEFAULT_REQUESTS_PER_SECOND, TokenBucketRateLimiter

__all__ = [
    "TokenBucketRateLimiter",
    "DEFAULT_REQUESTS_PER_SECOND",
    "DEFAULT_BURST_SIZE",
]
