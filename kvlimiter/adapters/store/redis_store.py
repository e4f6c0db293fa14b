"""Redis-backed KV store.

Each limiter record maps to one Redis string. ``put`` is a single ``SET`` with
``EX``, so a write replaces the whole record atomically and refreshes its TTL.
"""

from __future__ import annotations

from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from kvlimiter.adapters.store.base import AbstractKVStore, ValueFormat
from kvlimiter.core.errors import StoreAppError
from kvlimiter.limiter.codec import decode


class RedisKVStore(AbstractKVStore):
    """Store records in Redis using ``redis.asyncio``."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, *, timeout_seconds: float = 5.0) -> RedisKVStore:
        """Build a store from a ``redis://`` URL."""

        client = Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )
        return cls(client)

    async def get(self, key: str, format: ValueFormat = "json") -> Any:
        try:
            raw = await self._client.get(key)
        except RedisError as exc:
            raise StoreAppError(
                code="kv_read_failed",
                message=f"Redis GET failed: {exc}",
                details={"backend": "redis"},
            ) from exc

        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        if format == "text":
            return raw
        return decode(raw)

    async def put(self, key: str, value: str, *, expiration_ttl: int | None = None) -> None:
        try:
            await self._client.set(key, value, ex=expiration_ttl)
        except RedisError as exc:
            raise StoreAppError(
                code="kv_write_failed",
                message=f"Redis SET failed: {exc}",
                details={"backend": "redis"},
            ) from exc

    async def aclose(self) -> None:
        await self._client.aclose()
