"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

import pytest

from neckar_core.config.settings import Settings
from neckar_infra.cache.coordinator import CacheCoordinator
from neckar_infra.cache.memory_cache import ExpiringCache
from tests.mocks.mock_clock import FakeClock
from tests.mocks.mock_http import FakeNeckarServer
from tests.mocks.mock_settings import make_oidc_settings, make_settings, make_vault_settings


@pytest.fixture
def clock() -> FakeClock:
    """Return a clock frozen at a fixed instant."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ExpiringCache:
    """Return an empty cache driven by the fake clock."""
    return ExpiringCache(clock=clock)


@pytest.fixture
def coordinator(cache: ExpiringCache) -> CacheCoordinator:
    """Return a single-flight coordinator over the fake-clock cache."""
    return CacheCoordinator(cache)


@pytest.fixture
def server() -> FakeNeckarServer:
    """Return a fresh fake OIDC provider and Neckar API."""
    return FakeNeckarServer()


@pytest.fixture
def settings() -> Settings:
    """Return settings with no credentials configured."""
    return make_settings()


@pytest.fixture
def oidc_settings() -> Settings:
    """Return settings selecting direct OIDC."""
    return make_oidc_settings()


@pytest.fixture
def vault_settings() -> Settings:
    """Return settings selecting vault-mediated OIDC."""
    return make_vault_settings()
