"""Unit tests for the sliding window + interval decision engine."""

from kvlimiter.limiter.codec import WindowState
from kvlimiter.limiter.engine import evaluate


def _evaluate(timestamps, now, *, limit=3, interval=0, period=60):
    return evaluate(
        WindowState(tuple(timestamps)),
        now=now,
        limit=limit,
        interval_ms=interval * 1000,
        period_ms=period * 1000,
    )


def test_empty_state_is_admitted() -> None:
    decision = _evaluate([], now=0, limit=1, interval=10)

    assert decision.success is True
    assert decision.allowed_by_limit is True
    assert decision.allowed_by_interval is True
    assert decision.reset == 0


def test_limit_gate_reset_uses_oldest_entry() -> None:
    decision = _evaluate([0, 1000], now=2000, limit=2)

    assert decision.success is False
    assert decision.allowed_by_limit is False
    assert decision.allowed_by_interval is True
    assert decision.reset == 58


def test_interval_gate_reset_uses_latest_entry() -> None:
    decision = _evaluate([0], now=0, limit=3, interval=10)

    assert decision.success is False
    assert decision.allowed_by_limit is True
    assert decision.allowed_by_interval is False
    assert decision.reset == 10


def test_interval_gate_opens_exactly_at_boundary() -> None:
    assert _evaluate([0], now=9_999, interval=10).success is False
    assert _evaluate([0], now=10_000, interval=10).success is True


def test_reset_rounds_partial_seconds_up() -> None:
    decision = _evaluate([500], now=1000, interval=10)

    # 500 + 10_000 - 1000 = 9_500 ms
    assert decision.reset == 10


def test_both_gates_blocked_reports_larger_wait() -> None:
    # limit wait: 0 + 60_000 - 5_000 = 55s; interval wait: 4_000 + 30_000 - 5_000 = 29s
    decision = _evaluate([0, 4_000], now=5_000, limit=2, interval=30)

    assert decision.allowed_by_limit is False
    assert decision.allowed_by_interval is False
    assert decision.reset == 55


def test_both_gates_blocked_interval_dominates() -> None:
    # limit wait: 0 + 60_000 - 50_000 = 10s; interval wait: 49_000 + 60_000 - 50_000 = 59s
    decision = _evaluate([0, 49_000], now=50_000, limit=2, interval=60)

    assert decision.reset == 59


def test_reset_never_negative() -> None:
    # Clock skew: the newest entry is in the future relative to ``now``.
    decision = _evaluate([10_000], now=0, limit=1)

    assert decision.success is False
    assert decision.reset == 70
    assert _evaluate([-70_000, -60_500], now=0, limit=2, period=60).reset == 0
