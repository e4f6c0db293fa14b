"""KV-backed sliding window rate limiter."""

from kvlimiter.limiter.base import AbstractRateLimiter, RateLimitResult
from kvlimiter.limiter.config import LimiterConfig, validate_options
from kvlimiter.limiter.kv_limiter import KVRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "KVRateLimiter",
    "LimiterConfig",
    "RateLimitResult",
    "validate_options",
]
