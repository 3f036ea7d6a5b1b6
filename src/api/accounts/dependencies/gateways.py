"""Process-wide adapters: remote gateways and the per-user lock.

These hold connection pools or in-memory lock tables and must outlive a
single request, so they are created once and cached.
"""

from functools import lru_cache

from accounts.infrastructure.auction_gateway import HttpAuctionGateway
from accounts.infrastructure.locking import KeyedUserLock
from accounts.infrastructure.valuation_gateway import HttpValuationGateway
from infrastructure.settings import (
    get_auction_service_settings,
    get_valuation_service_settings,
)


@lru_cache
def get_auction_gateway() -> HttpAuctionGateway:
    """Get the Auction service gateway (singleton)."""
    settings = get_auction_service_settings()
    return HttpAuctionGateway(
        base_url=settings.base_url, timeout=settings.timeout_seconds
    )


@lru_cache
def get_valuation_gateway() -> HttpValuationGateway:
    """Get the Item service gateway (singleton)."""
    settings = get_valuation_service_settings()
    return HttpValuationGateway(
        base_url=settings.base_url, timeout=settings.timeout_seconds
    )


@lru_cache
def get_user_lock() -> KeyedUserLock:
    """Get the per-user lock table (singleton)."""
    return KeyedUserLock()


async def close_gateways() -> None:
    """Close the HTTP clients of any gateway that was created.

    Clears the caches so the next request builds fresh clients.
    """
    if get_auction_gateway.cache_info().currsize:
        await get_auction_gateway().aclose()
        get_auction_gateway.cache_clear()
    if get_valuation_gateway.cache_info().currsize:
        await get_valuation_gateway().aclose()
        get_valuation_gateway.cache_clear()
