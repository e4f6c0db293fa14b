"""Rate limiting dependency for FastAPI routes.

Wires the KV-backed limiter into the HTTP layer. The limiter and its store
are built lazily from settings and cached per process; if the limiter or
store settings change (mostly in tests) they are rebuilt and the previous
store connection is closed.

Key selection: a hash of the ``X-API-Key`` header when present, otherwise
the client IP. Raw API keys never reach the store.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import Header, HTTPException, Request, status

from kvlimiter.adapters.store.base import AbstractKVStore
from kvlimiter.adapters.store.factory import create_kv_store
from kvlimiter.core.config import settings
from kvlimiter.core.errors import ConfigurationAppError, InvalidConfigurationError
from kvlimiter.core.logging import hash_key
from kvlimiter.limiter.base import AbstractRateLimiter, RateLimitResult
from kvlimiter.limiter.kv_limiter import KVRateLimiter

logger = logging.getLogger(__name__)

_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple | None = None
_store: AbstractKVStore | None = None


def _settings_fingerprint() -> tuple:
    cfg = settings.limiter
    return (
        cfg.limit,
        cfg.period,
        cfg.interval,
        cfg.prefix,
        tuple(sorted(settings.store.model_dump().items())),
    )


async def _close_store(store: Any) -> None:
    aclose = getattr(store, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as exc:
        logger.warning(
            "rate_limit.store_close_failed",
            extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
        )


async def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide limiter, rebuilding it when settings change.

    Raises:
        ConfigurationAppError: The service's limiter settings are invalid.
    """

    global _limiter, _limiter_config, _store

    config = _settings_fingerprint()
    if _limiter is not None and _limiter_config == config:
        return _limiter

    cfg = settings.limiter
    store = create_kv_store(settings.store)
    try:
        limiter = KVRateLimiter(
            store,
            limit=cfg.limit,
            period=cfg.period,
            interval=cfg.interval,
            prefix=cfg.prefix,
        )
    except InvalidConfigurationError as exc:
        await _close_store(store)
        logger.error(
            "rate_limit.misconfigured",
            extra={"error_msg": exc.message, "field": (exc.details or {}).get("field")},
        )
        raise ConfigurationAppError(
            code="limiter_misconfigured",
            message=exc.message,
            details=exc.details,
        ) from exc

    previous = _store
    _limiter, _limiter_config, _store = limiter, config, store
    if previous is not None:
        await _close_store(previous)

    return _limiter


async def close_rate_limiter() -> None:
    """Close the cached store connection and forget the limiter."""

    store = _store
    reset_rate_limiter()
    if store is not None:
        await _close_store(store)


def reset_rate_limiter() -> None:
    """Forget the cached limiter so the next request rebuilds it."""

    global _limiter, _limiter_config, _store
    _limiter = None
    _limiter_config = None
    _store = None


def build_rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset),
    }
    if not result.success:
        headers["Retry-After"] = str(result.reset)
    return headers


def _build_rate_limit_key(request: Request, x_api_key: str | None) -> str:
    if x_api_key:
        return f"api_key:{hash_key(x_api_key)}"

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


async def enforce_rate_limit(
    request: Request,
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> RateLimitResult | None:
    """FastAPI dependency consuming one request from the caller's budget.

    Returns:
        The limiter result when limiting is enabled, otherwise None.

    Raises:
        HTTPException: 429 Too Many Requests when either gate is closed.
    """

    if not settings.app.rate_limit_enabled:
        return None

    limiter = await get_rate_limiter()
    key = _build_rate_limit_key(request, x_api_key)
    key_type = "api_key" if x_api_key else "ip"

    result = await limiter.consume(key)
    log_extra = {
        "key_type": key_type,
        "key_hash": hash_key(key),
        "limit": result.limit,
        "remaining": result.remaining,
        "period_s": settings.limiter.period,
    }

    if result.success:
        logger.info("rate_limit.allowed", extra=log_extra)
        return result

    logger.warning("rate_limit.exceeded", extra={**log_extra, "retry_after_s": result.reset})

    headers = None
    if settings.app.rate_limit_include_headers:
        headers = build_rate_limit_headers(result)

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=f"Rate limited. Try again in {result.reset}s",
        headers=headers,
    )
