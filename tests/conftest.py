"""Shared test fixtures for the AsterDEX client."""

import pytest

from asterdex.config import ExchangeSettings, PrecisionSettings
from asterdex.precision.cache import InMemoryPrecisionCache
from asterdex.precision.resolver import PrecisionResolver


@pytest.fixture
def exchange_settings() -> ExchangeSettings:
    """Exchange settings with dummy API keys."""
    return ExchangeSettings(
        api_key="test-api-key",  # type: ignore[arg-type]
        api_secret="test-api-secret",  # type: ignore[arg-type]
    )


@pytest.fixture
def precision_settings() -> PrecisionSettings:
    """Reactive live detection (the default behaviour)."""
    return PrecisionSettings(live_detection=True, proactive_detection=False)


@pytest.fixture
def precision_cache() -> InMemoryPrecisionCache:
    return InMemoryPrecisionCache()


@pytest.fixture
def resolver(precision_cache: InMemoryPrecisionCache) -> PrecisionResolver:
    """PrecisionResolver backed by an empty in-memory cache."""
    return PrecisionResolver(precision_cache)
