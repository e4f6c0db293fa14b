"""Sliding window rate limiter backed by an external KV store.

Each key owns one record holding the timestamps of its accepted requests.
A call reads the record, prunes it, decides, and writes it back only when
something changed.

Consistency notes:
- No locks or compare-and-swap: two concurrent calls for the same key can
  both admit and push the stored record past ``limit``. The next read trims
  it back to the newest ``limit`` entries.
- Store failures never reach the caller. A failed read behaves like an
  empty history (fail-open) and a failed write is dropped after logging.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from kvlimiter.core.errors import InvalidKeyError
from kvlimiter.core.logging import hash_key
from kvlimiter.limiter.base import AbstractRateLimiter, RateLimitResult
from kvlimiter.limiter.codec import WindowState, encode, normalize
from kvlimiter.limiter.config import LimiterConfig, validate_options
from kvlimiter.limiter.engine import Decision, evaluate

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class KVRateLimiter(AbstractRateLimiter):
    """Rate limiter combining a sliding window log with an interval gate.

    The instance holds only its configuration and the store handle, so one
    limiter can serve any number of concurrent requests.

    Example:
        >>> limiter = KVRateLimiter(store, limit=3, period=60, interval=10)
        >>> result = await limiter("203.0.113.7")
        >>> result.success, result.remaining, result.reset
        (True, 2, 0)
    """

    def __init__(
        self,
        store: Any,
        *,
        limit: Any,
        period: Any,
        interval: Any = 0,
        prefix: Any = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """Validate options and bind the limiter to ``store``.

        Args:
            store: Object exposing async ``get(key, format)`` and
                ``put(key, value, expiration_ttl=...)``.
            limit: Maximum accepted requests per window.
            period: Window length in seconds (>= 60), also the record TTL.
            interval: Minimum seconds between accepted requests (0 disables).
            prefix: Key namespace; defaults to ``"ratelimit:"``.
            clock: Time source returning UNIX time in milliseconds.

        Raises:
            InvalidConfigurationError: If any option is invalid.
        """
        self._config = validate_options(
            store,
            limit=limit,
            period=period,
            interval=interval,
            prefix=prefix,
        )
        self._store = store
        self._clock = clock

    def __repr__(self) -> str:  # pragma: no cover - representation only
        cfg = self._config
        return (
            f"KVRateLimiter(limit={cfg.limit}, period={cfg.period}, "
            f"interval={cfg.interval}, prefix={cfg.prefix!r})"
        )

    @property
    def config(self) -> LimiterConfig:
        return self._config

    async def __call__(self, key: str) -> RateLimitResult:
        return await self.consume(key)

    async def consume(self, key: str) -> RateLimitResult:
        """Record one request for ``key`` when both gates admit it.

        On success the current time is appended and the record is written
        back with a fresh TTL. On rejection the record is written back only
        when pruning removed entries.

        Args:
            key: Rate limit key (e.g., client IP or API key).

        Returns:
            RateLimitResult for this request.

        Raises:
            InvalidKeyError: If key is not a non-empty string.
        """
        store_key = self._store_key(key)
        now = self._clock()

        state, changed = await self._load(store_key, now)
        decision = self._evaluate(state, now)

        if decision.success:
            state = state.append(now)
            await self._save(store_key, state)
        elif changed:
            await self._save(store_key, state)

        result = self._build_result(decision, state)
        self._log_decision(key, result, operation="consume")
        return result

    async def inspect(self, key: str) -> RateLimitResult:
        """Report the decision ``consume`` would make, without writing.

        Pruning and trimming are applied to the in-memory copy only.

        Raises:
            InvalidKeyError: If key is not a non-empty string.
        """
        store_key = self._store_key(key)
        now = self._clock()

        state, _ = await self._load(store_key, now)
        decision = self._evaluate(state, now)
        return self._build_result(decision, state)

    def _store_key(self, key: str) -> str:
        if not isinstance(key, str) or not key:
            raise InvalidKeyError()
        return self._config.prefix + key

    async def _load(self, store_key: str, now: int) -> tuple[WindowState, bool]:
        cfg = self._config
        raw = await self._read(store_key)
        return normalize(raw, now=now, period=cfg.period, limit=cfg.limit)

    def _evaluate(self, state: WindowState, now: int) -> Decision:
        cfg = self._config
        return evaluate(
            state,
            now=now,
            limit=cfg.limit,
            interval_ms=cfg.interval_ms,
            period_ms=cfg.period_ms,
        )

    async def _read(self, store_key: str) -> Any:
        try:
            raw = await self._store.get(store_key, "json")
        except Exception as exc:  # noqa: BLE001 - fail-open on any store error
            logger.warning(
                "ratelimit.store_read_failed",
                extra={
                    "key_hash": hash_key(store_key),
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return []
        return raw

    async def _save(self, store_key: str, state: WindowState) -> None:
        try:
            await self._store.put(
                store_key,
                encode(state),
                expiration_ttl=self._config.period,
            )
        except Exception as exc:  # noqa: BLE001 - a lost write must not fail the request
            logger.warning(
                "ratelimit.store_write_failed",
                extra={
                    "key_hash": hash_key(store_key),
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )

    def _build_result(self, decision: Decision, state: WindowState) -> RateLimitResult:
        limit = self._config.limit
        return RateLimitResult(
            success=decision.success,
            limit=limit,
            remaining=max(0, limit - len(state)),
            reset=decision.reset,
        )

    def _log_decision(self, key: str, result: RateLimitResult, *, operation: str) -> None:
        event = "ratelimit.allowed" if result.success else "ratelimit.blocked"
        logger.debug(
            event,
            extra={
                "operation": operation,
                "key_hash": hash_key(key),
                "limit": result.limit,
                "remaining": result.remaining,
                "reset_s": result.reset,
            },
        )
