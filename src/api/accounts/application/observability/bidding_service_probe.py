"""Protocol for bidding service observability.

Defines the interface for domain probes that capture application-level
domain events for the bidding workflows (place bid, abandon bid, create
auction, liquidate item).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class BiddingServiceProbe(Protocol):
    """Domain probe for bidding workflow operations."""

    def bid_placed(
        self, user_id: str, auction_id: int, amount: float, newly_active: bool
    ) -> None:
        """Record that a bid was accepted remotely and recorded locally."""
        ...

    def bid_failed(
        self, user_id: str, auction_id: int, amount: float, error: str
    ) -> None:
        """Record that placing a bid failed."""
        ...

    def bid_not_active(self, user_id: str, auction_id: int) -> None:
        """Record that an abandon request targeted an inactive auction."""
        ...

    def bid_abandoned(self, user_id: str, auction_id: int, removed: bool) -> None:
        """Record that a bid was retracted."""
        ...

    def bid_abandon_failed(self, user_id: str, auction_id: int, error: str) -> None:
        """Record that abandoning a bid failed."""
        ...

    def auction_created(
        self, user_id: str, auction_id: int, item_id: int, starting_price: float
    ) -> None:
        """Record that an auction was created and recorded."""
        ...

    def auction_creation_failed(self, user_id: str, item_id: int, error: str) -> None:
        """Record that creating an auction failed."""
        ...

    def item_liquidated(
        self, user_id: str, item_id: int, market_value: float, credited: int
    ) -> None:
        """Record that an item was sold to the system."""
        ...

    def liquidation_failed(self, user_id: str, item_id: int, error: str) -> None:
        """Record that liquidating an item failed."""
        ...

    def roster_entry_added(self, user_id: str, auction_id: int, roster: str) -> None:
        """Record that an auction was added to a roster without a remote call."""
        ...

    def local_commit_failed(
        self, user_id: str, operation: str, remote_ref: int, error: str
    ) -> None:
        """Record that the remote call succeeded but the local commit did not."""
        ...

    def with_context(self, context: ObservationContext) -> BiddingServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultBiddingServiceProbe:
    """Default implementation of BiddingServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultBiddingServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultBiddingServiceProbe(logger=self._logger, context=context)

    def bid_placed(
        self, user_id: str, auction_id: int, amount: float, newly_active: bool
    ) -> None:
        """Record that a bid was accepted remotely and recorded locally."""
        self._logger.info(
            "bid_placed",
            user_id=user_id,
            auction_id=auction_id,
            amount=amount,
            newly_active=newly_active,
            **self._get_context_kwargs(),
        )

    def bid_failed(
        self, user_id: str, auction_id: int, amount: float, error: str
    ) -> None:
        """Record that placing a bid failed."""
        self._logger.error(
            "bid_failed",
            user_id=user_id,
            auction_id=auction_id,
            amount=amount,
            error=error,
            **self._get_context_kwargs(),
        )

    def bid_not_active(self, user_id: str, auction_id: int) -> None:
        """Record that an abandon request targeted an inactive auction."""
        self._logger.info(
            "bid_not_active",
            user_id=user_id,
            auction_id=auction_id,
            **self._get_context_kwargs(),
        )

    def bid_abandoned(self, user_id: str, auction_id: int, removed: bool) -> None:
        """Record that a bid was retracted."""
        self._logger.info(
            "bid_abandoned",
            user_id=user_id,
            auction_id=auction_id,
            removed=removed,
            **self._get_context_kwargs(),
        )

    def bid_abandon_failed(self, user_id: str, auction_id: int, error: str) -> None:
        """Record that abandoning a bid failed."""
        self._logger.error(
            "bid_abandon_failed",
            user_id=user_id,
            auction_id=auction_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def auction_created(
        self, user_id: str, auction_id: int, item_id: int, starting_price: float
    ) -> None:
        """Record that an auction was created and recorded."""
        self._logger.info(
            "auction_created",
            user_id=user_id,
            auction_id=auction_id,
            item_id=item_id,
            starting_price=starting_price,
            **self._get_context_kwargs(),
        )

    def auction_creation_failed(self, user_id: str, item_id: int, error: str) -> None:
        """Record that creating an auction failed."""
        self._logger.error(
            "auction_creation_failed",
            user_id=user_id,
            item_id=item_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def item_liquidated(
        self, user_id: str, item_id: int, market_value: float, credited: int
    ) -> None:
        """Record that an item was sold to the system."""
        self._logger.info(
            "item_liquidated",
            user_id=user_id,
            item_id=item_id,
            market_value=market_value,
            credited=credited,
            **self._get_context_kwargs(),
        )

    def liquidation_failed(self, user_id: str, item_id: int, error: str) -> None:
        """Record that liquidating an item failed."""
        self._logger.error(
            "liquidation_failed",
            user_id=user_id,
            item_id=item_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def roster_entry_added(self, user_id: str, auction_id: int, roster: str) -> None:
        """Record that an auction was added to a roster without a remote call."""
        self._logger.info(
            "roster_entry_added",
            user_id=user_id,
            auction_id=auction_id,
            roster=roster,
            **self._get_context_kwargs(),
        )

    def local_commit_failed(
        self, user_id: str, operation: str, remote_ref: int, error: str
    ) -> None:
        """Record that the remote call succeeded but the local commit did not.

        The Auction service is now ahead of the local aggregate. Logged at
        critical level so the drift can be found and re-synced.
        """
        self._logger.critical(
            "local_commit_failed",
            user_id=user_id,
            operation=operation,
            remote_ref=remote_ref,
            error=error,
            **self._get_context_kwargs(),
        )
