"""Pydantic models for account API requests and responses."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from accounts.application.value_objects import AbandonBidResult, LiquidationResult
from accounts.domain.aggregates import User
from accounts.domain.value_objects import AuctionId, ItemId, UserRole
from accounts.ports.gateway_models import AuctionView
from shared_kernel.auth import AccessToken


class UserRoleEnum(StrEnum):
    """API-level enum for account roles."""

    USER = "user"
    ADMIN = "admin"

    def to_domain(self) -> UserRole:
        return UserRole(self.value)


class RegisterRequest(BaseModel):
    """Request model for registering an account.

    Fields are optional at the schema level so that a missing field is
    reported with the same message as a blank one.
    """

    username: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None)
    role: UserRoleEnum | None = Field(
        default=None, description="Requested role; admin requires an admin caller"
    )


class LoginRequest(BaseModel):
    """Request model for obtaining a bearer token."""

    username: str = Field(..., description="Account username")
    password: str = Field(..., description="Account password")


class TokenResponse(BaseModel):
    """Response model for an issued bearer token."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime

    @classmethod
    def from_domain(cls, token: AccessToken) -> TokenResponse:
        return cls(
            access_token=token.token,
            token_type=token.token_type,
            expires_at=token.expires_at,
        )


class UpdateUserRequest(BaseModel):
    """Request model for updating an account. Omitted fields are unchanged."""

    username: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=1, max_length=255)
    role: UserRoleEnum | None = None


class UserResponse(BaseModel):
    """Response model for an account."""

    id: str = Field(..., description="User ID (ULID format)")
    username: str
    email: str
    role: UserRole
    limcoins: int = Field(..., description="Current LimCoin balance")
    items: list[int] = Field(default_factory=list, description="Owned item IDs")
    active_bids: list[int] = Field(
        default_factory=list, description="Auctions the user is bidding on"
    )
    created_auctions: list[int] = Field(
        default_factory=list, description="Auctions the user listed"
    )

    @classmethod
    def from_domain(cls, user: User) -> UserResponse:
        """Convert domain User aggregate to API response.

        The password hash never leaves the service.
        """
        return cls(
            id=user.id.value,
            username=user.username,
            email=user.email,
            role=user.role,
            limcoins=user.balance,
            items=[item.value for item in user.inventory.items],
            active_bids=[a.value for a in user.roster.active_bids],
            created_auctions=[a.value for a in user.roster.created_auctions],
        )


class CoinAdjustmentResponse(BaseModel):
    """Response model for a soft coin adjustment."""

    success: bool = Field(..., description="False if the adjustment was refused")


class CreateAuctionRequest(BaseModel):
    """Request model for listing an item in a new auction."""

    item_id: int = Field(..., gt=0, description="Item to put up for auction")
    starting_price: float = Field(..., description="Opening price")


class AuctionIdResponse(BaseModel):
    """Response model carrying an auction identifier."""

    auction_id: int

    @classmethod
    def from_domain(cls, auction_id: AuctionId) -> AuctionIdResponse:
        return cls(auction_id=auction_id.value)


class AuctionResponse(BaseModel):
    """Response model for an auction read from the Auction service."""

    id: int
    item_id: int | None = None
    seller_id: str | None = None
    current_highest_bid: float
    highest_bidder_id: str | None = None
    status: str

    @classmethod
    def from_view(cls, view: AuctionView) -> AuctionResponse:
        return cls(**view.model_dump())


class PlaceBidResponse(BaseModel):
    """Response model for a placed bid."""

    auction_id: int
    newly_active: bool = Field(
        ..., description="False if the user was already bidding on this auction"
    )
    message: str


class AbandonBidResponse(BaseModel):
    """Response model for an abandon-bid request."""

    auction_id: int
    was_active: bool
    removed: bool
    message: str

    @classmethod
    def from_result(cls, result: AbandonBidResult) -> AbandonBidResponse:
        return cls(
            auction_id=result.auction_id.value,
            was_active=result.was_active,
            removed=result.removed,
            message=result.message,
        )


class LiquidationResponse(BaseModel):
    """Response model for an item sold to the system."""

    item_id: int
    market_value: float
    credited: int
    limcoins: int

    @classmethod
    def from_result(cls, result: LiquidationResult) -> LiquidationResponse:
        return cls(
            item_id=result.item_id.value,
            market_value=result.market_value,
            credited=result.credited,
            limcoins=result.balance,
        )


class IdListResponse(BaseModel):
    """Response model for a list of item or auction identifiers."""

    ids: list[int]

    @classmethod
    def from_domain(cls, ids: list[AuctionId] | list[ItemId]) -> IdListResponse:
        return cls(ids=[i.value for i in ids])
