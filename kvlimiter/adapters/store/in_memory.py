"""In-memory KV store with per-record expiry.

Notes:
- Per-process only: running multiple workers gives each its own history.
- Safe under asyncio: every operation completes without awaiting, so no
  other task can observe a half-applied change.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from kvlimiter.adapters.store.base import AbstractKVStore, ValueFormat
from kvlimiter.limiter.codec import decode

logger = logging.getLogger(__name__)


@dataclass
class _Record:
    value: str
    expires_at: float | None


class InMemoryKVStore(AbstractKVStore):
    """Dictionary-backed store honouring ``expiration_ttl``.

    Attributes:
        clock: Time source returning UNIX time in seconds.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._records: dict[str, _Record] = {}

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryKVStore(size={len(self._records)})"

    def __len__(self) -> int:
        self._evict_expired()
        return len(self._records)

    async def get(self, key: str, format: ValueFormat = "json") -> Any:
        record = self._records.get(key)
        if record is None:
            return None

        if self._is_expired(record):
            self._records.pop(key, None)
            logger.debug("kv.memory.expired", extra={"key_length": len(key)})
            return None

        if format == "text":
            return record.value
        return decode(record.value)

    async def put(self, key: str, value: str, *, expiration_ttl: int | None = None) -> None:
        expires_at = self._clock() + expiration_ttl if expiration_ttl else None
        self._records[key] = _Record(value=value, expires_at=expires_at)

    def clear(self) -> None:
        """Drop every record."""

        self._records.clear()

    def _evict_expired(self) -> None:
        expired = [k for k, record in self._records.items() if self._is_expired(record)]
        for key in expired:
            self._records.pop(key, None)

    def _is_expired(self, record: _Record) -> bool:
        return record.expires_at is not None and self._clock() >= record.expires_at
