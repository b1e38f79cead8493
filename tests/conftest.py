"""
Test configuration for pytest
"""

import os

# Test environment variables (set before rentalshop reads its settings)
os.environ["MAIN_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEBUG"] = "false"
os.environ["ENVIRONMENT"] = "test"

import pytest

from rentalshop.core.tenant_manager import TenantManager
from tests.factories import NOW, FakeClientFactory, FakeClock, FakeRegistry


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(registry, client_factory, clock) -> TenantManager:
    """Fresh tenant manager per test (cache limit of 3 entries)"""
    return TenantManager(
        registry,
        client_factory,
        cache_ttl_ms=5 * 60 * 1000,
        max_cache_entries=3,
        clock=clock,
        now=lambda: NOW,
    )
