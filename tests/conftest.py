from typing import Any, Mapping, Optional

import pytest

from core.dispatcher import ToolDispatcher
from core.errors import CacheFailure


class FakeCacheStore:
    """In-memory stand-in for Redis that records every operation."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.reads: list[str] = []
        self.writes: list[str] = []
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> Optional[str]:
        self.reads.append(key)
        if self.fail_reads:
            raise CacheFailure("connection refused")
        return self.data.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.writes.append(key)
        if self.fail_writes:
            raise CacheFailure("connection refused")
        self.data[key] = value
        self.ttls[key] = ttl_seconds


class RecordingUpstream:
    """Upstream fake: returns ``response`` (or raises ``error``) and logs each call."""

    def __init__(self, response: Any = None) -> None:
        self.response = response if response is not None else {"ok": True}
        self.error: Optional[Exception] = None
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def fetch(self, path: str, params: Mapping[str, Any]) -> Any:
        self.calls.append((path, dict(params)))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def cache() -> FakeCacheStore:
    return FakeCacheStore()


@pytest.fixture
def upstream() -> RecordingUpstream:
    return RecordingUpstream({"reviews": [{"id": 1, "rating": 5}]})


@pytest.fixture
def dispatcher(upstream: RecordingUpstream, cache: FakeCacheStore) -> ToolDispatcher:
    return ToolDispatcher(upstream, cache, cache_ttl=3600)
