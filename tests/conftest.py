"""
Pytest fixtures and configuration for datagate tests.

Provides adapters, services and a controllable clock for unit testing.
"""

from typing import Any, Optional

import pytest

from datagate.adapters.memory import InMemoryAdapter
from datagate.cache.memory import CacheLayer
from datagate.core.models import HealthStatus, Record
from datagate.services.data import DataService

# =============================================================================
# Test Doubles
# =============================================================================


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingAdapter(InMemoryAdapter):
    """In-memory adapter counting real find_one calls."""

    def __init__(self) -> None:
        super().__init__()
        self.find_one_calls = 0

    async def find_one(self, table: str, record_id: str) -> Optional[Record]:
        self.find_one_calls += 1
        return await super().find_one(table, record_id)


class BrokenAdapter(InMemoryAdapter):
    """Adapter whose backend always fails."""

    provider = "broken"

    def __init__(self, error: Exception | None = None) -> None:
        super().__init__()
        self.error = error or RuntimeError("connection refused")
        self.calls = 0

    async def _fail(self, *args: Any, **kwargs: Any) -> Any:
        self.calls += 1
        raise self.error

    find_many = _fail
    find_one = _fail
    create = _fail
    create_many = _fail
    update = _fail
    delete = _fail
    delete_many = _fail
    count = _fail

    async def health_check(self) -> HealthStatus:
        raise self.error


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def adapter() -> InMemoryAdapter:
    """Create an empty in-memory adapter."""
    return InMemoryAdapter()


@pytest.fixture
def counting_adapter() -> CountingAdapter:
    """Create an in-memory adapter that counts find_one calls."""
    return CountingAdapter()


@pytest.fixture
def broken_adapter() -> BrokenAdapter:
    """Create an adapter that always fails."""
    return BrokenAdapter()


@pytest.fixture
def cache(clock: FakeClock) -> CacheLayer:
    """Create a cache with a 60 second TTL driven by the fake clock."""
    return CacheLayer(default_ttl=60, clock=clock)


@pytest.fixture
def service(counting_adapter: CountingAdapter, cache: CacheLayer) -> DataService:
    """Create a caching service over the counting adapter."""
    return DataService(counting_adapter, cache_ttl=60, cache=cache)


@pytest.fixture
def sample_users() -> list[Record]:
    """Create sample user rows."""
    return [
        {"name": "alice", "age": 34, "role": "admin", "email": "alice@example.com"},
        {"name": "bob", "age": 17, "role": "member", "email": None},
        {"name": "carol", "age": 25, "role": "member", "email": "Carol@Example.com"},
        {"name": "dave", "age": 25, "role": "owner", "email": "dave@example.org"},
    ]


@pytest.fixture
async def seeded_adapter(adapter: InMemoryAdapter, sample_users: list[Record]) -> InMemoryAdapter:
    """Create an in-memory adapter with a populated users table."""
    await adapter.create_many("users", sample_users)
    return adapter
