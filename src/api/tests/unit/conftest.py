"""Unit test fixtures shared across bounded contexts."""

import pytest


@pytest.fixture(autouse=True)
def clear_settings_caches():
    """Reset cached settings so environment overrides take effect per test."""
    from infrastructure.settings import (
        get_account_settings,
        get_auction_service_settings,
        get_database_settings,
        get_settings,
        get_valuation_service_settings,
    )

    caches = (
        get_settings,
        get_database_settings,
        get_auction_service_settings,
        get_valuation_service_settings,
        get_account_settings,
    )
    for cached in caches:
        cached.cache_clear()
    yield
    for cached in caches:
        cached.cache_clear()
