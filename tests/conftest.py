"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before anything imports the settings module so
no .env file leaks into the test run.
"""

import json
import os

os.environ["TESTING"] = "true"

os.environ.setdefault("KV_BACKEND", "memory")
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")

import pytest


class FakeKV:
    """KV store double that records writes and can be told to fail."""

    def __init__(self) -> None:
        self.map: dict[str, str] = {}
        self.put_calls: list[dict] = []
        self.get_calls: list[str] = []
        self.fail_put = False
        self.fail_get_keys: set[str] = set()

    async def get(self, key, format="json"):
        self.get_calls.append(key)
        if key in self.fail_get_keys:
            raise RuntimeError("get failed")
        value = self.map.get(key)
        if value is None:
            return None
        if format == "json":
            try:
                return json.loads(value)
            except ValueError:
                return None
        return value

    async def put(self, key, value, *, expiration_ttl=None):
        if self.fail_put:
            raise RuntimeError("put failed")
        self.map[key] = value
        self.put_calls.append({"key": key, "value": value, "expiration_ttl": expiration_ttl})

    def seed(self, key: str, timestamps) -> None:
        self.map[key] = json.dumps(timestamps)

    def stored(self, key: str):
        return json.loads(self.map[key])


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def kv() -> FakeKV:
    return FakeKV()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_kv():
    """Factory for extra independent stores within one test."""
    return FakeKV
