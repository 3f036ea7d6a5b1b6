"""Read models returned by the remote gateways."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AuctionView(BaseModel):
    """Read-only projection of an auction held by the Auction service.

    This context never mutates these fields; it only reads them.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0, description="Auction identifier")
    item_id: int | None = Field(default=None, description="Item on sale")
    seller_id: str | None = Field(default=None, description="Seller user ID")
    current_highest_bid: float = Field(default=0.0, description="Highest bid so far")
    highest_bidder_id: str | None = Field(
        default=None, description="User holding the highest bid"
    )
    status: str = Field(default="open", description="Auction status")


class ItemValuation(BaseModel):
    """Market value of an item as reported by the Item service."""

    model_config = ConfigDict(frozen=True)

    item_id: int = Field(..., gt=0, description="Item identifier")
    value: float = Field(
        ..., allow_inf_nan=False, description="Market value, possibly fractional"
    )
