"""Invariant violations raised by the accounts domain.

All of these subclass ValueError: they signal that a requested mutation
breaks a business rule of the aggregate and that nothing was changed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from accounts.domain.value_objects import AuctionId, ItemId


class InvalidAmountError(ValueError):
    """Raised when a currency amount or price is out of range."""

    def __init__(self, amount: int | float) -> None:
        super().__init__(f"Invalid amount: {amount}")
        self.amount = amount


class InsufficientFundsError(ValueError):
    """Raised when a debit exceeds the available balance."""

    def __init__(self, balance: int, requested: int) -> None:
        super().__init__(
            f"Insufficient LimCoins: balance {balance}, requested {requested}"
        )
        self.balance = balance
        self.requested = requested


class NotOwnedError(ValueError):
    """Raised when an item is not in the user's inventory."""

    def __init__(self, item_id: ItemId) -> None:
        super().__init__(f"Item {item_id} is not owned by this user")
        self.item_id = item_id


class AlreadyActiveError(ValueError):
    """Raised when an auction is already in the user's active bids."""

    def __init__(self, auction_id: AuctionId) -> None:
        super().__init__(f"Auction {auction_id} is already in the active bids")
        self.auction_id = auction_id


class AlreadyListedError(ValueError):
    """Raised when an auction is already in the user's created auctions."""

    def __init__(self, auction_id: AuctionId) -> None:
        super().__init__(f"Auction {auction_id} is already listed by this user")
        self.auction_id = auction_id
