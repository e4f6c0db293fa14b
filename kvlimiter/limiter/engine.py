"""Decision engine combining the sliding window and the interval gate."""

from __future__ import annotations

import math
from dataclasses import dataclass

from kvlimiter.limiter.codec import WindowState


@dataclass(frozen=True)
class Decision:
    """Outcome of evaluating a window state at a point in time.

    Attributes:
        allowed_by_limit: Fewer than ``limit`` requests are in the window.
        allowed_by_interval: The interval since the last request has elapsed.
        success: Both gates are open.
        reset: Seconds until every blocking gate clears; 0 on success.
    """

    allowed_by_limit: bool
    allowed_by_interval: bool
    success: bool
    reset: int


def evaluate(
    state: WindowState,
    *,
    now: int,
    limit: int,
    interval_ms: int,
    period_ms: int,
) -> Decision:
    """Decide whether one more request fits into ``state`` at ``now``.

    When both gates are closed the caller has to wait for the later of the
    two to open, so the larger wait is reported.
    """

    allowed_by_limit = len(state) < limit
    allowed_by_interval = (
        interval_ms == 0 or not state or (now - state.last) >= interval_ms
    )
    success = allowed_by_limit and allowed_by_interval

    if success:
        return Decision(
            allowed_by_limit=True,
            allowed_by_interval=True,
            success=True,
            reset=0,
        )

    waits: list[int] = []
    if not allowed_by_limit:
        waits.append(state.first + period_ms - now)
    if not allowed_by_interval:
        waits.append(state.last + interval_ms - now)

    reset = math.ceil(max(max(waits), 0) / 1000)
    return Decision(
        allowed_by_limit=allowed_by_limit,
        allowed_by_interval=allowed_by_interval,
        success=False,
        reset=reset,
    )
