"""Rate limiter interfaces.

The HTTP layer depends on this abstraction, not on the KV-backed
implementation, so tests and alternative limiters can be swapped in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a consume/inspect operation.

    Attributes:
        success: Whether the request is (or would be) admitted.
        limit: Max accepted requests per window.
        remaining: Admissible requests left in the window after this call.
        reset: Seconds until the blocking gate(s) clear; 0 when admitted.
    """

    success: bool
    limit: int
    remaining: int
    reset: int

    def to_dict(self) -> dict[str, int | bool]:
        return asdict(self)


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    async def consume(self, key: str) -> RateLimitResult:
        """Record one request for ``key`` if it is admitted.

        Args:
            key: Unique identifier (e.g., API key, IP address).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    async def inspect(self, key: str) -> RateLimitResult:
        """Report what ``consume`` would decide, without recording anything."""
        raise NotImplementedError
