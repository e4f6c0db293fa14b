"""KV store interface.

The limiter needs exactly two operations from its backing store: read a
record (optionally JSON-decoded) and replace a record with a TTL. Any object
providing ``get`` and ``put`` with these signatures works; subclassing
``AbstractKVStore`` is a convenience, not a requirement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Literal

ValueFormat = Literal["json", "text"]


class AbstractKVStore(ABC):
    """Interface for string-valued key-value stores with expiration."""

    @abstractmethod
    async def get(self, key: str, format: ValueFormat = "json") -> Any:
        """Fetch a record.

        Args:
            key: Full record key (prefix included).
            format: ``"json"`` to decode the value, ``"text"`` for the raw string.

        Returns:
            The decoded value, the raw text, or None when the key is absent
            (or, for ``"json"``, when the value is not valid JSON).

        Raises:
            StoreAppError: If the backend cannot be reached.
        """
        ...

    @abstractmethod
    async def put(self, key: str, value: str, *, expiration_ttl: int | None = None) -> None:
        """Replace a record.

        Args:
            key: Full record key (prefix included).
            value: String value to store.
            expiration_ttl: Seconds until the record expires; None keeps it forever.

        Raises:
            StoreAppError: If the backend cannot be reached.
        """
        ...
