"""Unit tests for limiter option validation."""

import pytest
from pydantic import ValidationError

from kvlimiter.core.config import LimiterSettings
from kvlimiter.core.errors import InvalidConfigurationError, ValidationAppError
from kvlimiter.limiter.config import LimiterConfig, is_kv_store, validate_options


class _NoPut:
    async def get(self, key, format="json"):
        return None


def test_defaults_applied(kv) -> None:
    config = validate_options(kv, limit=5, period=60)

    assert config == LimiterConfig(limit=5, period=60, interval=0, prefix="ratelimit:")
    assert config.period_ms == 60_000
    assert config.interval_ms == 0


def test_numeric_inputs_are_floored(kv) -> None:
    config = validate_options(kv, limit=2.9, period=90.7, interval=10.2)

    assert (config.limit, config.period, config.interval) == (2, 90, 10)


def test_config_is_immutable(kv) -> None:
    config = validate_options(kv, limit=1, period=60)

    with pytest.raises(AttributeError):
        config.limit = 2  # type: ignore[misc]


@pytest.mark.parametrize(
    ("store", "kwargs", "message"),
    [
        (None, {"limit": 1, "period": 60}, "store required with get/put methods"),
        (object(), {"limit": 1, "period": 60}, "store required with get/put methods"),
        (_NoPut(), {"limit": 1, "period": 60}, "store required with get/put methods"),
        ("kv", {"prefix": "", "limit": 1, "period": 60}, "prefix must be a non-empty string"),
        ("kv", {"prefix": 7, "limit": 1, "period": 60}, "prefix must be a non-empty string"),
        ("kv", {"limit": 0, "period": 60}, "limit must be >= 1"),
        ("kv", {"limit": 0.5, "period": 60}, "limit must be >= 1"),
        ("kv", {"limit": None, "period": 60}, "limit must be >= 1"),
        ("kv", {"limit": True, "period": 60}, "limit must be >= 1"),
        ("kv", {"limit": 1, "period": 59}, "period must be >= 60 seconds (KV TTL minimum)"),
        ("kv", {"limit": 1, "period": float("nan")}, "period must be >= 60 seconds (KV TTL minimum)"),
        ("kv", {"limit": 1, "period": 60, "interval": -1}, "interval must be >= 0"),
        ("kv", {"limit": 1, "period": 60, "interval": -0.5}, "interval must be >= 0"),
        ("kv", {"limit": 1, "period": 60, "interval": 61}, "interval must be <= period"),
    ],
)
def test_rejects_invalid_options(kv, store, kwargs: dict, message: str) -> None:
    target = kv if store == "kv" else store

    with pytest.raises(InvalidConfigurationError) as exc_info:
        validate_options(target, **kwargs)

    assert exc_info.value.message == message
    assert exc_info.value.code == "invalid_configuration"


def test_first_violation_wins(kv) -> None:
    # Every field is invalid; the store check comes first.
    with pytest.raises(InvalidConfigurationError, match="store required"):
        validate_options(None, prefix="", limit=0, period=1, interval=-1)

    with pytest.raises(InvalidConfigurationError, match="prefix"):
        validate_options(kv, prefix="", limit=0, period=1, interval=-1)

    with pytest.raises(InvalidConfigurationError, match="limit"):
        validate_options(kv, limit=0, period=1, interval=-1)

    with pytest.raises(InvalidConfigurationError, match="period"):
        validate_options(kv, limit=1, period=1, interval=-1)


def test_error_reports_field(kv) -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        validate_options(kv, limit=1, period=60, interval=120)

    assert exc_info.value.details == {"field": "interval"}


def test_interval_equal_to_period_is_allowed(kv) -> None:
    assert validate_options(kv, limit=1, period=60, interval=60).interval == 60


def test_is_kv_store(kv) -> None:
    assert is_kv_store(kv) is True
    assert is_kv_store(_NoPut()) is False
    assert is_kv_store(None) is False


@pytest.mark.parametrize(
    ("kwargs", "field"),
    [({"limit": 0}, "limit"), ({"period": 30}, "period"), ({"interval": -1}, "interval")],
)
def test_service_settings_reject_out_of_range_values(kwargs: dict, field: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        LimiterSettings(**kwargs)

    assert exc_info.value.errors()[0]["loc"] == (field,)
