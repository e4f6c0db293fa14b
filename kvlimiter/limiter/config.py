"""Validated, immutable limiter parameters."""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any

from kvlimiter.core.errors import InvalidConfigurationError

DEFAULT_PREFIX = "ratelimit:"

# Workers KV rejects expiration TTLs below one minute.
MIN_PERIOD_SECONDS = 60


@dataclass(frozen=True)
class LimiterConfig:
    """Parameters of a sliding window limiter with an optional interval gate.

    Attributes:
        limit: Maximum accepted requests per window.
        period: Window length in seconds; also the TTL of stored records.
        interval: Minimum seconds between two accepted requests (0 disables).
        prefix: Namespace prepended to every stored key.
    """

    limit: int
    period: int
    interval: int = 0
    prefix: str = DEFAULT_PREFIX

    @property
    def period_ms(self) -> int:
        return self.period * 1000

    @property
    def interval_ms(self) -> int:
        return self.interval * 1000


def is_kv_store(store: Any) -> bool:
    """Return True when ``store`` exposes callable ``get`` and ``put``."""

    return (
        store is not None
        and callable(getattr(store, "get", None))
        and callable(getattr(store, "put", None))
    )


def _floor(value: Any) -> int | None:
    """Floor a real number, returning None for anything that is not one."""

    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if not math.isfinite(value):
        return None
    return math.floor(value)


def validate_options(
    store: Any,
    *,
    limit: Any,
    period: Any,
    interval: Any = 0,
    prefix: Any = None,
) -> LimiterConfig:
    """Validate raw limiter options and build a ``LimiterConfig``.

    Checks run in a fixed order and the first failure wins, so the error for
    a given set of options is always the same: store, prefix, limit, period,
    interval lower bound, interval upper bound.

    Args:
        store: KV store the limiter will use; must expose ``get``/``put``.
        limit: Maximum accepted requests per window (floored, >= 1).
        period: Window length in seconds (floored, >= 60).
        interval: Minimum spacing in seconds (floored, 0 <= interval <= period).
        prefix: Key namespace; ``None`` selects ``"ratelimit:"``.

    Returns:
        LimiterConfig: The validated configuration.

    Raises:
        InvalidConfigurationError: On the first violated constraint.
    """

    if not is_kv_store(store):
        raise InvalidConfigurationError("store required with get/put methods", field="store")

    if prefix is None:
        prefix = DEFAULT_PREFIX
    if not isinstance(prefix, str) or not prefix:
        raise InvalidConfigurationError("prefix must be a non-empty string", field="prefix")

    limit_value = _floor(limit)
    period_value = _floor(period)
    interval_value = _floor(0 if interval is None else interval)

    if limit_value is None or limit_value < 1:
        raise InvalidConfigurationError("limit must be >= 1", field="limit")
    if period_value is None or period_value < MIN_PERIOD_SECONDS:
        raise InvalidConfigurationError(
            f"period must be >= {MIN_PERIOD_SECONDS} seconds (KV TTL minimum)",
            field="period",
        )
    if interval_value is None or interval_value < 0:
        raise InvalidConfigurationError("interval must be >= 0", field="interval")
    if interval_value > period_value:
        raise InvalidConfigurationError("interval must be <= period", field="interval")

    return LimiterConfig(
        limit=limit_value,
        period=period_value,
        interval=interval_value,
        prefix=prefix,
    )
