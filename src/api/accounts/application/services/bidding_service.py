"""Bidding application service for the accounts bounded context.

Orchestrates the four compound workflows that touch both the local User
aggregate and a remote service: place bid, abandon bid, create auction and
liquidate item.

The User store and the Auction service share no transaction. Every workflow
therefore calls the remote service first and applies the local mutation only
after the remote call has succeeded. If the local commit then fails, the
Auction service is ahead of the local aggregate; that drift is recorded on the
probe as local_commit_failed and can be re-synced. The opposite drift (local
state claiming a bid the Auction service never saw) cannot happen.
"""

from __future__ import annotations

import asyncio
import math
from typing import Any, Coroutine, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from accounts.application.observability import (
    BiddingServiceProbe,
    DefaultBiddingServiceProbe,
)
from accounts.application.value_objects import (
    AbandonBidResult,
    LiquidationResult,
    PlaceBidResult,
)
from accounts.domain.aggregates import User
from accounts.domain.exceptions import InvalidAmountError, NotOwnedError
from accounts.domain.value_objects import AuctionId, ItemId, UserId
from accounts.ports.exceptions import UserNotFoundError
from accounts.ports.gateway_models import AuctionView
from accounts.ports.gateways import IAuctionGateway, IValuationGateway
from accounts.ports.locking import IUserLock
from accounts.ports.repositories import IUserRepository


_T = TypeVar("_T")


async def _run_to_completion(workflow: Coroutine[Any, Any, _T]) -> _T:
    """Run a workflow that cancelling the caller cannot interrupt.

    Once a workflow has issued its remote call it must either commit or record
    the failure. A cancelled caller still sees CancelledError, but only after
    the workflow has finished on its own.
    """
    task = asyncio.ensure_future(workflow)
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        await asyncio.wait([task])
        if not task.cancelled():
            # Outcome already reported through the probe
            task.exception()
        raise


class BiddingService:
    """Application service for bid orchestration.

    Each mutating workflow holds the user's aggregate lock and a database
    transaction for its whole duration: load, validate, remote call, local
    mutation, persist. The remote-backed workflows are not interrupted when
    the caller is cancelled.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_repository: IUserRepository,
        auction_gateway: IAuctionGateway,
        valuation_gateway: IValuationGateway,
        user_lock: IUserLock,
        probe: BiddingServiceProbe | None = None,
    ):
        """Initialize BiddingService with dependencies.

        Args:
            session: Database session for transaction management
            user_repository: Repository for user persistence
            auction_gateway: Remote Auction service
            valuation_gateway: Remote Item service
            user_lock: Per-user mutual exclusion
            probe: Optional domain probe for observability
        """
        self._session = session
        self._user_repository = user_repository
        self._auction_gateway = auction_gateway
        self._valuation_gateway = valuation_gateway
        self._user_lock = user_lock
        self._probe = probe or DefaultBiddingServiceProbe()

    async def _load(self, user_id: UserId) -> User:
        user = await self._user_repository.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id.value)
        return user

    async def place_bid(
        self, user_id: UserId, auction_id: AuctionId, amount: float
    ) -> PlaceBidResult:
        """Place a bid on an auction and record it in the active bids.

        Bidding again on an auction that is already active is a raised bid,
        not an error: the roster is left as is.

        Args:
            user_id: The bidder
            auction_id: The auction to bid on
            amount: Bid amount

        Returns:
            PlaceBidResult telling whether the auction became active

        Raises:
            UserNotFoundError: If the user does not exist
            InvalidAmountError: If amount is not a positive finite number
            BidRejectedError: If the Auction service refuses the bid
            RemoteUnavailableError: If the Auction service cannot be reached
        """
        return await _run_to_completion(self._place_bid(user_id, auction_id, amount))

    async def _place_bid(
        self, user_id: UserId, auction_id: AuctionId, amount: float
    ) -> PlaceBidResult:
        remote_done = False
        try:
            async with self._user_lock.hold(user_id):
                async with self._session.begin():
                    user = await self._load(user_id)
                    if not math.isfinite(amount) or amount <= 0:
                        raise InvalidAmountError(amount)

                    await self._auction_gateway.place_bid(auction_id, user_id, amount)
                    remote_done = True

                    newly_active = not user.roster.is_active(auction_id)
                    if newly_active:
                        user.roster.activate(auction_id)
                    await self._user_repository.save(user)

        except Exception as e:
            if remote_done:
                self._probe.local_commit_failed(
                    user_id=user_id.value,
                    operation="place_bid",
                    remote_ref=auction_id.value,
                    error=str(e),
                )
            self._probe.bid_failed(
                user_id=user_id.value,
                auction_id=auction_id.value,
                amount=amount,
                error=str(e),
            )
            raise

        self._probe.bid_placed(
            user_id=user_id.value,
            auction_id=auction_id.value,
            amount=amount,
            newly_active=newly_active,
        )
        return PlaceBidResult(auction_id=auction_id, newly_active=newly_active)

    async def abandon_bid(
        self, user_id: UserId, auction_id: AuctionId
    ) -> AbandonBidResult:
        """Retract the user's bid on an auction and drop it from active bids.

        An auction that is not in the active bids is reported through the
        result, not as an error, and the Auction service is not called.
        Calling this twice is therefore safe: the second call reports
        was_active=False and changes nothing.

        Args:
            user_id: The bidder
            auction_id: The auction to leave

        Returns:
            AbandonBidResult describing what happened

        Raises:
            UserNotFoundError: If the user does not exist
            NoStandingBidError: If the Auction service has no bid to retract
            RemoteUnavailableError: If the Auction service cannot be reached
        """
        return await _run_to_completion(self._abandon_bid(user_id, auction_id))

    async def _abandon_bid(
        self, user_id: UserId, auction_id: AuctionId
    ) -> AbandonBidResult:
        remote_done = False
        try:
            async with self._user_lock.hold(user_id):
                async with self._session.begin():
                    user = await self._load(user_id)
                    if not user.roster.is_active(auction_id):
                        self._probe.bid_not_active(
                            user_id=user_id.value, auction_id=auction_id.value
                        )
                        return AbandonBidResult(
                            auction_id=auction_id, was_active=False, removed=False
                        )

                    await self._auction_gateway.retract_bid(auction_id, user_id)
                    remote_done = True

                    removed = user.roster.deactivate(auction_id)
                    await self._user_repository.save(user)

        except Exception as e:
            if remote_done:
                self._probe.local_commit_failed(
                    user_id=user_id.value,
                    operation="abandon_bid",
                    remote_ref=auction_id.value,
                    error=str(e),
                )
            self._probe.bid_abandon_failed(
                user_id=user_id.value,
                auction_id=auction_id.value,
                error=str(e),
            )
            raise

        self._probe.bid_abandoned(
            user_id=user_id.value, auction_id=auction_id.value, removed=removed
        )
        return AbandonBidResult(auction_id=auction_id, was_active=True, removed=removed)

    async def create_auction(
        self, user_id: UserId, item_id: ItemId, starting_price: float
    ) -> AuctionId:
        """List an item in a new auction and record it as created by the user.

        Args:
            user_id: The seller
            item_id: The item to put up for auction
            starting_price: Opening price

        Returns:
            The identifier assigned by the Auction service

        Raises:
            UserNotFoundError: If the user does not exist
            InvalidAmountError: If starting_price is negative or not finite
            AuctionRejectedError: If the Auction service refuses the listing
            RemoteUnavailableError: If the Auction service cannot be reached
        """
        return await _run_to_completion(
            self._create_auction(user_id, item_id, starting_price)
        )

    async def _create_auction(
        self, user_id: UserId, item_id: ItemId, starting_price: float
    ) -> AuctionId:
        auction_id: AuctionId | None = None
        try:
            async with self._user_lock.hold(user_id):
                async with self._session.begin():
                    user = await self._load(user_id)
                    if not math.isfinite(starting_price) or starting_price < 0:
                        raise InvalidAmountError(starting_price)

                    auction_id = await self._auction_gateway.create_auction(
                        user_id, item_id, starting_price
                    )

                    user.roster.record_created(auction_id)
                    await self._user_repository.save(user)

        except Exception as e:
            if auction_id is not None:
                self._probe.local_commit_failed(
                    user_id=user_id.value,
                    operation="create_auction",
                    remote_ref=auction_id.value,
                    error=str(e),
                )
            self._probe.auction_creation_failed(
                user_id=user_id.value, item_id=item_id.value, error=str(e)
            )
            raise

        self._probe.auction_created(
            user_id=user_id.value,
            auction_id=auction_id.value,
            item_id=item_id.value,
            starting_price=starting_price,
        )
        return auction_id

    async def liquidate_item(self, user_id: UserId, item_id: ItemId) -> LiquidationResult:
        """Sell an owned item to the system at its current market value.

        The balance is credited with the market value rounded down to a whole
        number of LimCoins. A negative valuation credits nothing.

        Args:
            user_id: The owner
            item_id: The item to sell

        Returns:
            LiquidationResult with the market value and the credited amount

        Raises:
            UserNotFoundError: If the user does not exist
            NotOwnedError: If the user does not own the item (no remote call made)
            ItemUnknownError: If the Item service does not know the item
            RemoteUnavailableError: If the Item service cannot be reached
        """
        return await _run_to_completion(self._liquidate_item(user_id, item_id))

    async def _liquidate_item(
        self, user_id: UserId, item_id: ItemId
    ) -> LiquidationResult:
        try:
            async with self._user_lock.hold(user_id):
                async with self._session.begin():
                    user = await self._load(user_id)
                    if not user.inventory.owns(item_id):
                        raise NotOwnedError(item_id)

                    valuation = await self._valuation_gateway.fetch_value(item_id)
                    credited = max(0, math.floor(valuation.value))

                    user.ledger.credit(credited)
                    user.inventory.remove(item_id)
                    await self._user_repository.save(user)

        except Exception as e:
            self._probe.liquidation_failed(
                user_id=user_id.value, item_id=item_id.value, error=str(e)
            )
            raise

        self._probe.item_liquidated(
            user_id=user_id.value,
            item_id=item_id.value,
            market_value=valuation.value,
            credited=credited,
        )
        return LiquidationResult(
            item_id=item_id,
            market_value=valuation.value,
            credited=credited,
            balance=user.balance,
        )

    async def add_active_bid(self, user_id: UserId, auction_id: AuctionId) -> None:
        """Record an auction in the active bids without calling the Auction service.

        Used when the Auction service itself reports a bid placed through it.

        Raises:
            UserNotFoundError: If the user does not exist
            AlreadyActiveError: If the auction is already active
        """
        async with self._user_lock.hold(user_id):
            async with self._session.begin():
                user = await self._load(user_id)
                user.roster.activate(auction_id)
                await self._user_repository.save(user)

        self._probe.roster_entry_added(
            user_id=user_id.value, auction_id=auction_id.value, roster="active_bids"
        )

    async def add_created_auction(self, user_id: UserId, auction_id: AuctionId) -> None:
        """Record an auction as created by the user without calling the Auction service.

        Raises:
            UserNotFoundError: If the user does not exist
            AlreadyListedError: If the auction is already recorded
        """
        async with self._user_lock.hold(user_id):
            async with self._session.begin():
                user = await self._load(user_id)
                user.roster.record_created(auction_id)
                await self._user_repository.save(user)

        self._probe.roster_entry_added(
            user_id=user_id.value,
            auction_id=auction_id.value,
            roster="created_auctions",
        )

    async def get_active_bids(self, user_id: UserId) -> list[AuctionId]:
        """List the auctions the user is bidding on.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self._load(user_id)
        return user.roster.active_bids

    async def get_created_auctions(self, user_id: UserId) -> list[AuctionId]:
        """List the auctions the user created.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self._load(user_id)
        return user.roster.created_auctions

    async def get_auction(self, auction_id: AuctionId) -> AuctionView:
        """Read an auction from the Auction service.

        Raises:
            AuctionNotFoundError: If the auction does not exist
            RemoteUnavailableError: If the Auction service cannot be reached
        """
        return await self._auction_gateway.fetch_auction(auction_id)
