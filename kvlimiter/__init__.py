"""Sliding window rate limiting on top of an eventually consistent KV store."""

from kvlimiter.core.errors import InvalidConfigurationError, InvalidKeyError
from kvlimiter.limiter import KVRateLimiter, RateLimitResult

__all__ = [
    "InvalidConfigurationError",
    "InvalidKeyError",
    "KVRateLimiter",
    "RateLimitResult",
]
