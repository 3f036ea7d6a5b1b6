"""Remote gateway protocols (ports) for the accounts bounded context.

The Auction service and the Item service are independent systems with
their own stores. These ports describe the only operations this context
calls on them. Implementations must surface unreachable services and
timeouts as RemoteUnavailableError and domain refusals as the specific
error types in accounts.ports.exceptions.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from accounts.domain.value_objects import AuctionId, ItemId, UserId
from accounts.ports.gateway_models import AuctionView, ItemValuation


@runtime_checkable
class IAuctionGateway(Protocol):
    """Calls consumed from the remote Auction service."""

    async def create_auction(
        self, seller_id: UserId, item_id: ItemId, starting_price: float
    ) -> AuctionId:
        """Open a new auction for an item.

        Returns:
            The identifier assigned by the Auction service

        Raises:
            AuctionRejectedError: If the Auction service refuses the listing
            RemoteUnavailableError: If the service cannot be reached
        """
        ...

    async def place_bid(
        self, auction_id: AuctionId, bidder_id: UserId, amount: float
    ) -> None:
        """Place a bid on an auction.

        Raises:
            BidRejectedError: If the Auction service refuses the bid
            RemoteUnavailableError: If the service cannot be reached
        """
        ...

    async def retract_bid(self, auction_id: AuctionId, bidder_id: UserId) -> None:
        """Remove the bidder's standing bid from an auction.

        Raises:
            NoStandingBidError: If the bidder has no standing bid
            RemoteUnavailableError: If the service cannot be reached
        """
        ...

    async def fetch_auction(self, auction_id: AuctionId) -> AuctionView:
        """Look up an auction.

        Raises:
            AuctionNotFoundError: If the auction does not exist
            RemoteUnavailableError: If the service cannot be reached
        """
        ...


@runtime_checkable
class IValuationGateway(Protocol):
    """Calls consumed from the remote Item service."""

    async def fetch_value(self, item_id: ItemId) -> ItemValuation:
        """Fetch the current market value of an item.

        Raises:
            ItemUnknownError: If the item does not exist
            RemoteUnavailableError: If the service cannot be reached
        """
        ...
