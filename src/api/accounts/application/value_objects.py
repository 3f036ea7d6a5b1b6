"""Application-layer value objects for the accounts bounded context.

These are value objects specific to the application layer, representing
the authentication context of a request and the outcomes of workflows.
"""

from __future__ import annotations

from dataclasses import dataclass

from accounts.domain.value_objects import AuctionId, ItemId, UserId, UserRole


@dataclass(frozen=True)
class CurrentUser:
    """Represents the currently authenticated caller.

    Extracted from the bearer token and passed explicitly into the
    services that need the caller's role, rather than read from ambient
    request state.
    """

    user_id: UserId
    username: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_act_for(self, user_id: UserId) -> bool:
        """Check whether the caller may act on the given account."""
        return self.is_admin or self.user_id == user_id


@dataclass(frozen=True)
class PlaceBidResult:
    """Outcome of a successful place-bid workflow.

    newly_active is False when the user was already bidding on the auction
    (a raised bid on an auction already in the roster).
    """

    auction_id: AuctionId
    newly_active: bool


@dataclass(frozen=True)
class AbandonBidResult:
    """Outcome of an abandon-bid workflow.

    was_active is False when the auction was not in the user's active bids;
    in that case nothing was sent to the Auction service.
    """

    auction_id: AuctionId
    was_active: bool
    removed: bool

    @property
    def message(self) -> str:
        if not self.was_active:
            return (
                f"Auction with ID {self.auction_id} not found in user's active bids."
            )
        if self.removed:
            return f"Bid abandoned successfully from auction ID {self.auction_id}."
        return f"Failed to abandon bid from auction ID {self.auction_id}."


@dataclass(frozen=True)
class LiquidationResult:
    """Outcome of selling an item to the system.

    market_value is the value reported by the Item service; credited is
    the whole number of LimCoins actually added to the balance.
    """

    item_id: ItemId
    market_value: float
    credited: int
    balance: int
