"""Unit tests for the window state codec."""

import pytest

from kvlimiter.limiter.codec import WindowState, decode, encode, normalize


def test_sorts_without_marking_changed() -> None:
    state, changed = normalize([1600, 1000, 1500], now=2600, period=60, limit=4)

    assert state.timestamps == (1000, 1500, 1600)
    assert changed is False


def test_drops_expired_entries() -> None:
    # cutoff = 70_000 - 60_000 = 10_000; an entry exactly at the cutoff is expired
    state, changed = normalize([5_000, 10_000, 10_001, 60_000], now=70_000, period=60, limit=10)

    assert state.timestamps == (10_001, 60_000)
    assert changed is True


def test_drops_non_numeric_entries() -> None:
    raw = [1000, "2000", None, True, float("inf"), {"ts": 3}, 1500.0]
    state, changed = normalize(raw, now=2000, period=60, limit=10)

    assert state.timestamps == (1000, 1500)
    assert changed is True


def test_trims_to_most_recent_limit_entries() -> None:
    state, changed = normalize([3000, 1000, 2000], now=4000, period=60, limit=2)

    assert state.timestamps == (2000, 3000)
    assert changed is True


def test_keeps_duplicates() -> None:
    state, changed = normalize([1000, 1000], now=1000, period=60, limit=3)

    assert state.timestamps == (1000, 1000)
    assert changed is False


@pytest.mark.parametrize("raw", [None, {}, "[1,2]", 42])
def test_non_list_record_is_empty_history(raw) -> None:
    state, changed = normalize(raw, now=0, period=60, limit=3)

    assert state == WindowState()
    assert changed is False


def test_append_returns_new_state() -> None:
    state = WindowState((1000,))
    appended = state.append(2000)

    assert state.timestamps == (1000,)
    assert appended.timestamps == (1000, 2000)
    assert appended.first == 1000
    assert appended.last == 2000


def test_empty_state_has_no_bounds() -> None:
    state = WindowState()

    assert not state
    assert len(state) == 0
    assert state.first is None
    assert state.last is None


def test_encode_produces_compact_json_array() -> None:
    assert encode(WindowState((1000, 2000))) == "[1000,2000]"
    assert encode(WindowState()) == "[]"


def test_decode_tolerates_garbage() -> None:
    assert decode("[1000,2000]") == [1000, 2000]
    assert decode(b"[5]") == [5]
    assert decode("not json") is None
    assert decode(None) is None


def test_fractional_timestamp_at_cutoff_is_expired() -> None:
    # cutoff = 119_000 - 60_000 = 59_000; 59_000.5 truncates onto it
    state, changed = normalize([59_000.5], now=119_000, period=60, limit=3)

    assert state == WindowState()
    assert changed is True


def test_fractional_timestamp_is_truncated_and_marks_changed() -> None:
    state, changed = normalize([1000, 1500.7], now=2000, period=60, limit=3)

    assert state.timestamps == (1000, 1500)
    assert all(type(ts) is int for ts in state.timestamps)
    assert changed is True


def test_integral_float_does_not_mark_changed() -> None:
    state, changed = normalize([1000, 1500.0], now=2000, period=60, limit=3)

    assert state.timestamps == (1000, 1500)
    assert changed is False
