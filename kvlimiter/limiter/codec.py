"""Window state codec.

The stored record is a JSON array of millisecond timestamps, one per
accepted request. ``normalize`` turns whatever the store returned into a
``WindowState`` that is sorted, inside the window and no longer than the
limit, and reports whether anything had to be dropped to get there.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from numbers import Real
from typing import Any


@dataclass(frozen=True)
class WindowState:
    """Ordered timestamps (ms since epoch) of accepted requests for one key."""

    timestamps: tuple[int, ...] = ()

    def __len__(self) -> int:
        return len(self.timestamps)

    def __bool__(self) -> bool:
        return bool(self.timestamps)

    @property
    def first(self) -> int | None:
        return self.timestamps[0] if self.timestamps else None

    @property
    def last(self) -> int | None:
        return self.timestamps[-1] if self.timestamps else None

    def append(self, now: int) -> WindowState:
        """Return a new state with ``now`` recorded as the latest request."""

        return WindowState(self.timestamps + (now,))

    def to_list(self) -> list[int]:
        return list(self.timestamps)


def _is_timestamp(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, Real) and math.isfinite(value)


def normalize(raw: Any, *, now: int, period: int, limit: int) -> tuple[WindowState, bool]:
    """Prune and order a stored record.

    Args:
        raw: Decoded record as returned by the store. Anything other than a
            list is treated as an empty history.
        now: Current time in milliseconds.
        period: Window length in seconds.
        limit: Maximum number of entries to keep.

    Returns:
        Tuple of (state, changed) where ``changed`` is True when expired,
        non-numeric or surplus entries were removed, or a fractional
        timestamp was truncated.
    """

    if not isinstance(raw, list):
        return WindowState(), False

    cutoff = now - period * 1000
    numeric = [ts for ts in raw if _is_timestamp(ts)]
    truncated = [int(ts) for ts in numeric]
    # Truncate before comparing so a fractional entry at the cutoff expires.
    kept = sorted(ts for ts in truncated if ts > cutoff)
    changed = len(kept) != len(raw) or truncated != numeric

    # Concurrent writers can each append past the limit; keep the newest.
    if len(kept) > limit:
        kept = kept[-limit:]
        changed = True

    return WindowState(tuple(kept)), changed


def encode(state: WindowState) -> str:
    """Serialize a state to the JSON array stored in the KV record."""

    return json.dumps(state.to_list(), separators=(",", ":"))


def decode(text: str | bytes | None) -> Any:
    """Parse a stored record, returning None when it is missing or not JSON."""

    if text is None:
        return None
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None
