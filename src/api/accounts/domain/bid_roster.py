"""Auction rosters kept on the user side."""

from __future__ import annotations

from collections.abc import Iterable

from accounts.domain.exceptions import AlreadyActiveError, AlreadyListedError
from accounts.domain.value_objects import AuctionId


class BidRoster:
    """The two auction lists a user maintains.

    Business rules:
    - active_bids holds auctions the user currently has a standing bid on
    - created_auctions holds auctions the user listed as seller
    - Neither list contains duplicates
    - An auction enters active_bids only after the Auction service has
      accepted the bid (enforced by the bidding workflow, not here)
    """

    def __init__(
        self,
        active_bids: Iterable[AuctionId] = (),
        created_auctions: Iterable[AuctionId] = (),
    ) -> None:
        # dict.fromkeys drops duplicates from stored rows while keeping order
        self._active_bids: list[AuctionId] = list(dict.fromkeys(active_bids))
        self._created_auctions: list[AuctionId] = list(
            dict.fromkeys(created_auctions)
        )

    @property
    def active_bids(self) -> list[AuctionId]:
        """Auctions being bid on, in the order they were joined (a copy)."""
        return list(self._active_bids)

    @property
    def created_auctions(self) -> list[AuctionId]:
        """Auctions listed by the user, oldest first (a copy)."""
        return list(self._created_auctions)

    def is_active(self, auction_id: AuctionId) -> bool:
        """Check whether the user is bidding on the auction."""
        return auction_id in self._active_bids

    def is_listed(self, auction_id: AuctionId) -> bool:
        """Check whether the user created the auction."""
        return auction_id in self._created_auctions

    def activate(self, auction_id: AuctionId) -> None:
        """Add an auction to the active bids.

        Raises:
            AlreadyActiveError: If the auction is already active
        """
        if self.is_active(auction_id):
            raise AlreadyActiveError(auction_id)
        self._active_bids.append(auction_id)

    def deactivate(self, auction_id: AuctionId) -> bool:
        """Remove an auction from the active bids.

        Returns:
            True if the auction was removed, False if it was not active
        """
        if not self.is_active(auction_id):
            return False
        self._active_bids.remove(auction_id)
        return True

    def record_created(self, auction_id: AuctionId) -> None:
        """Add an auction to the created auctions.

        Raises:
            AlreadyListedError: If the auction is already recorded
        """
        if self.is_listed(auction_id):
            raise AlreadyListedError(auction_id)
        self._created_auctions.append(auction_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BidRoster):
            return NotImplemented
        return (
            self._active_bids == other._active_bids
            and self._created_auctions == other._created_auctions
        )

    def __repr__(self) -> str:
        return (
            f"BidRoster(active_bids={self._active_bids!r}, "
            f"created_auctions={self._created_auctions!r})"
        )
