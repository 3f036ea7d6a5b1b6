"""HTTP routes for account management and bid orchestration."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from accounts.application.services import AccountService, BiddingService
from accounts.application.value_objects import CurrentUser
from accounts.dependencies.authentication import get_current_user, get_optional_user
from accounts.dependencies.services import get_account_service, get_bidding_service
from accounts.domain.exceptions import (
    AlreadyActiveError,
    AlreadyListedError,
    InsufficientFundsError,
    InvalidAmountError,
    NotOwnedError,
)
from accounts.domain.value_objects import AuctionId, ItemId, UserId
from accounts.ports.exceptions import (
    AuctionNotFoundError,
    AuctionRejectedError,
    BidRejectedError,
    ConcurrentModificationError,
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidRegistrationError,
    ItemUnknownError,
    NoStandingBidError,
    RemoteUnavailableError,
    UnauthorizedError,
    UserNotFoundError,
)
from accounts.presentation.models import (
    AbandonBidResponse,
    AuctionIdResponse,
    AuctionResponse,
    CoinAdjustmentResponse,
    CreateAuctionRequest,
    IdListResponse,
    LiquidationResponse,
    LoginRequest,
    PlaceBidResponse,
    RegisterRequest,
    TokenResponse,
    UpdateUserRequest,
    UserResponse,
)
from infrastructure.settings import get_account_settings

router = APIRouter(
    prefix="/users",
    tags=["users"],
)

# Checked in order; the first matching class decides the status code.
_ERROR_STATUS: tuple[tuple[type[Exception], int], ...] = (
    (UserNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateUserError, status.HTTP_409_CONFLICT),
    (ConcurrentModificationError, status.HTTP_409_CONFLICT),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (InvalidRegistrationError, status.HTTP_400_BAD_REQUEST),
    (InvalidAmountError, status.HTTP_400_BAD_REQUEST),
    (InsufficientFundsError, status.HTTP_400_BAD_REQUEST),
    (NotOwnedError, status.HTTP_400_BAD_REQUEST),
    (AlreadyActiveError, status.HTTP_400_BAD_REQUEST),
    (AlreadyListedError, status.HTTP_400_BAD_REQUEST),
    (BidRejectedError, 422),
    (AuctionRejectedError, 422),
    (NoStandingBidError, status.HTTP_409_CONFLICT),
    (AuctionNotFoundError, status.HTTP_404_NOT_FOUND),
    (ItemUnknownError, status.HTTP_404_NOT_FOUND),
    (RemoteUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)

_HANDLED_ERRORS = tuple(error for error, _ in _ERROR_STATUS)


def _http_error(error: Exception) -> HTTPException:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Unexpected error",
    )


def _parse_user_id(user_id: str) -> UserId:
    try:
        return UserId.from_string(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid user ID format",
        )


def _parse_auction_id(auction_id: int) -> AuctionId:
    try:
        return AuctionId(value=auction_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid auction ID",
        )


def _parse_item_id(item_id: int) -> ItemId:
    try:
        return ItemId(value=item_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid item ID",
        )


def _require_self_or_admin(current_user: CurrentUser, user_id: UserId) -> None:
    if not current_user.can_act_for(user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only act on your own account",
        )


# ---------------------------------------------------------------------------
# Registration and login
# ---------------------------------------------------------------------------


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    caller: Annotated[CurrentUser | None, Depends(get_optional_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> UserResponse:
    """Register a new account with the starting LimCoin grant.

    Raises:
        HTTPException: 400 if a required field is missing or blank
        HTTPException: 403 if an admin account is requested by a non-admin
        HTTPException: 409 if the username or email is taken
    """
    try:
        user = await service.register(
            username=request.username,
            email=request.email,
            password=request.password,
            role=request.role.to_domain() if request.role else None,
            caller_role=caller.role if caller else None,
        )
        return UserResponse.from_domain(user)

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.post("/login")
async def login(
    request: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> TokenResponse:
    """Exchange a username and password for a bearer token.

    Raises:
        HTTPException: 401 if the credentials are wrong
    """
    try:
        token = await service.authenticate(request.username, request.password)
        return TokenResponse.from_domain(token)

    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


@router.get("")
async def list_users(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> list[UserResponse]:
    """List every account (admin only)."""
    try:
        users = await service.list_users(caller_role=current_user.role)
        return [UserResponse.from_domain(user) for user in users]

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.get("/top-limcoins")
async def top_users_by_balance(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> list[UserResponse]:
    """List the accounts with the highest balances (admin only)."""
    try:
        users = await service.top_users_by_balance(
            caller_role=current_user.role,
            limit=get_account_settings().top_users_limit,
        )
        return [UserResponse.from_domain(user) for user in users]

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> UserResponse:
    """Get an account (self or admin).

    Raises:
        HTTPException: 400 if the user ID is invalid
        HTTPException: 403 if the caller is neither the user nor an admin
        HTTPException: 404 if the user does not exist
    """
    user_id_obj = _parse_user_id(user_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        user = await service.get_user(user_id_obj)
        return UserResponse.from_domain(user)

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> UserResponse:
    """Update an account's username, email or role (admin only)."""
    user_id_obj = _parse_user_id(user_id)

    try:
        user = await service.update_user(
            user_id=user_id_obj,
            caller_role=current_user.role,
            username=request.username,
            email=request.email,
            role=request.role.to_domain() if request.role else None,
        )
        return UserResponse.from_domain(user)

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> Response:
    """Delete an account (admin only).

    The Auction service is not told; bids the user still holds there remain.
    """
    user_id_obj = _parse_user_id(user_id)

    try:
        await service.delete_user(user_id_obj, caller_role=current_user.role)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


# ---------------------------------------------------------------------------
# Ledger and inventory
# ---------------------------------------------------------------------------


@router.post("/{user_id}/add-coins")
async def add_coins(
    user_id: str,
    amount: Annotated[int, Query(description="LimCoins to credit")],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> CoinAdjustmentResponse:
    """Credit LimCoins. Refusals are reported as success=false, not as errors."""
    user_id_obj = _parse_user_id(user_id)
    _require_self_or_admin(current_user, user_id_obj)

    success = await service.add_coins(user_id_obj, amount)
    return CoinAdjustmentResponse(success=success)


@router.post("/{user_id}/deduct-coins")
async def deduct_coins(
    user_id: str,
    amount: Annotated[int, Query(description="LimCoins to debit")],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> CoinAdjustmentResponse:
    """Debit LimCoins. Refusals are reported as success=false, not as errors."""
    user_id_obj = _parse_user_id(user_id)
    _require_self_or_admin(current_user, user_id_obj)

    success = await service.deduct_coins(user_id_obj, amount)
    return CoinAdjustmentResponse(success=success)


@router.post("/{user_id}/items/{item_id}", status_code=status.HTTP_201_CREATED)
async def add_item(
    user_id: str,
    item_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> IdListResponse:
    """Add an item to the user's inventory and return the inventory."""
    user_id_obj = _parse_user_id(user_id)
    item_id_obj = _parse_item_id(item_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        await service.add_item(user_id_obj, item_id_obj)
        return IdListResponse.from_domain(await service.get_items(user_id_obj))

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.get("/{user_id}/items")
async def get_items(
    user_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> IdListResponse:
    """List the user's items."""
    user_id_obj = _parse_user_id(user_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        return IdListResponse.from_domain(await service.get_items(user_id_obj))

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.post("/{user_id}/items/{item_id}/sell")
async def liquidate_item(
    user_id: str,
    item_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BiddingService, Depends(get_bidding_service)],
) -> LiquidationResponse:
    """Sell an owned item to the system at its market value.

    Raises:
        HTTPException: 400 if the user does not own the item
        HTTPException: 404 if the Item service does not know the item
        HTTPException: 503 if the Item service is unavailable
    """
    user_id_obj = _parse_user_id(user_id)
    item_id_obj = _parse_item_id(item_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        result = await service.liquidate_item(user_id_obj, item_id_obj)
        return LiquidationResponse.from_result(result)

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


# ---------------------------------------------------------------------------
# Bids
# ---------------------------------------------------------------------------


@router.post("/{user_id}/bids/{auction_id}")
async def place_bid(
    user_id: str,
    auction_id: int,
    amount: Annotated[float, Query(description="Bid amount")],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BiddingService, Depends(get_bidding_service)],
) -> PlaceBidResponse:
    """Place a bid through the Auction service and record it locally.

    Raises:
        HTTPException: 400 if the amount is not positive
        HTTPException: 422 if the Auction service refuses the bid
        HTTPException: 503 if the Auction service is unavailable
    """
    user_id_obj = _parse_user_id(user_id)
    auction_id_obj = _parse_auction_id(auction_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        result = await service.place_bid(user_id_obj, auction_id_obj, amount)
        return PlaceBidResponse(
            auction_id=result.auction_id.value,
            newly_active=result.newly_active,
            message=f"Bid placed successfully on auction ID {result.auction_id}.",
        )

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.delete("/{user_id}/bids/{auction_id}")
async def abandon_bid(
    user_id: str,
    auction_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BiddingService, Depends(get_bidding_service)],
) -> AbandonBidResponse:
    """Retract the user's bid and drop the auction from the active bids.

    An auction that is not active is reported in the body with status 200.
    """
    user_id_obj = _parse_user_id(user_id)
    auction_id_obj = _parse_auction_id(auction_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        result = await service.abandon_bid(user_id_obj, auction_id_obj)
        return AbandonBidResponse.from_result(result)

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.get("/{user_id}/bids")
async def get_active_bids(
    user_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BiddingService, Depends(get_bidding_service)],
) -> IdListResponse:
    """List the auctions the user is bidding on."""
    user_id_obj = _parse_user_id(user_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        return IdListResponse.from_domain(await service.get_active_bids(user_id_obj))

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.post(
    "/{user_id}/bids/{auction_id}/track", status_code=status.HTTP_204_NO_CONTENT
)
async def track_active_bid(
    user_id: str,
    auction_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BiddingService, Depends(get_bidding_service)],
) -> Response:
    """Record an active bid without calling the Auction service."""
    user_id_obj = _parse_user_id(user_id)
    auction_id_obj = _parse_auction_id(auction_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        await service.add_active_bid(user_id_obj, auction_id_obj)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


# ---------------------------------------------------------------------------
# Auctions
# ---------------------------------------------------------------------------


@router.post("/{user_id}/auctions", status_code=status.HTTP_201_CREATED)
async def create_auction(
    user_id: str,
    request: CreateAuctionRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BiddingService, Depends(get_bidding_service)],
) -> AuctionIdResponse:
    """List an item in a new auction and record it as created by the user.

    Raises:
        HTTPException: 400 if the starting price is negative
        HTTPException: 422 if the Auction service refuses the listing
        HTTPException: 503 if the Auction service is unavailable
    """
    user_id_obj = _parse_user_id(user_id)
    item_id_obj = _parse_item_id(request.item_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        auction_id = await service.create_auction(
            user_id_obj, item_id_obj, request.starting_price
        )
        return AuctionIdResponse.from_domain(auction_id)

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.get("/{user_id}/auctions")
async def get_created_auctions(
    user_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BiddingService, Depends(get_bidding_service)],
) -> IdListResponse:
    """List the auctions the user created."""
    user_id_obj = _parse_user_id(user_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        return IdListResponse.from_domain(
            await service.get_created_auctions(user_id_obj)
        )

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.post(
    "/{user_id}/auctions/{auction_id}/track", status_code=status.HTTP_204_NO_CONTENT
)
async def track_created_auction(
    user_id: str,
    auction_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BiddingService, Depends(get_bidding_service)],
) -> Response:
    """Record a created auction without calling the Auction service."""
    user_id_obj = _parse_user_id(user_id)
    auction_id_obj = _parse_auction_id(auction_id)
    _require_self_or_admin(current_user, user_id_obj)

    try:
        await service.add_created_auction(user_id_obj, auction_id_obj)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e


@router.get("/auctions/{auction_id}")
async def get_auction(
    auction_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BiddingService, Depends(get_bidding_service)],
) -> AuctionResponse:
    """Read an auction from the Auction service."""
    auction_id_obj = _parse_auction_id(auction_id)

    try:
        return AuctionResponse.from_view(await service.get_auction(auction_id_obj))

    except _HANDLED_ERRORS as e:
        raise _http_error(e) from e
