"""HTTP implementation of IAuctionGateway.

Talks to the Auction service over its REST interface. Identifiers and
amounts travel as path segments; the service answers created auction ids as
a bare JSON number and auctions as JSON objects.
"""

from __future__ import annotations

import time

import httpx
from pydantic import ValidationError

from accounts.domain.value_objects import AuctionId, ItemId, UserId
from accounts.infrastructure.observability import (
    DefaultRemoteGatewayProbe,
    RemoteGatewayProbe,
)
from accounts.ports.exceptions import (
    AuctionNotFoundError,
    AuctionRejectedError,
    BidRejectedError,
    NoStandingBidError,
    RemoteUnavailableError,
)
from accounts.ports.gateway_models import AuctionView
from accounts.ports.gateways import IAuctionGateway

_SERVICE = "Auction"


def _format_amount(amount: float) -> str:
    """Render an amount for a path segment, dropping a trailing .0."""
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


class HttpAuctionGateway(IAuctionGateway):
    """httpx-backed gateway to the Auction service.

    Transport failures, timeouts and 5xx answers all surface as
    RemoteUnavailableError. 4xx answers are refusals and map to the
    operation's specific error, carrying the remote body as the message.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        probe: RemoteGatewayProbe | None = None,
    ):
        """Initialize the gateway.

        Args:
            base_url: Root URL of the Auction service resource
            timeout: Per-request timeout in seconds
            client: Optional preconfigured client (tests pass a MockTransport)
            probe: Optional domain probe for observability
        """
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout
        )
        self._probe = probe or DefaultRemoteGatewayProbe()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _send(self, operation: str, method: str, path: str) -> httpx.Response:
        """Issue a request and translate unavailability into RemoteUnavailableError.

        Returns any response below 500; callers interpret 4xx themselves.
        """
        self._probe.call_started(_SERVICE, operation, path)
        started = time.perf_counter()
        try:
            response = await self._client.request(method, path)
        except httpx.TimeoutException as e:
            self._probe.service_unavailable(_SERVICE, operation, reason="timeout")
            raise RemoteUnavailableError(_SERVICE, "timeout") from e
        except httpx.HTTPError as e:
            self._probe.service_unavailable(_SERVICE, operation, reason=repr(e))
            raise RemoteUnavailableError(_SERVICE, str(e) or type(e).__name__) from e

        if response.status_code >= 500:
            self._probe.service_unavailable(
                _SERVICE,
                operation,
                reason="server error",
                status_code=response.status_code,
            )
            raise RemoteUnavailableError(_SERVICE, f"HTTP {response.status_code}")

        if response.status_code < 400:
            self._probe.call_succeeded(
                _SERVICE,
                operation,
                status_code=response.status_code,
                elapsed_ms=(time.perf_counter() - started) * 1000,
            )
        return response

    def _rejection_detail(self, operation: str, response: httpx.Response) -> str:
        detail = response.text.strip() or f"HTTP {response.status_code}"
        self._probe.call_rejected(_SERVICE, operation, response.status_code, detail)
        return detail

    async def create_auction(
        self, seller_id: UserId, item_id: ItemId, starting_price: float
    ) -> AuctionId:
        path = f"/{seller_id.value}/{item_id.value}/{_format_amount(starting_price)}"
        response = await self._send("create_auction", "POST", path)
        if response.is_client_error:
            raise AuctionRejectedError(
                self._rejection_detail("create_auction", response)
            )

        try:
            return AuctionId(value=int(response.json()))
        except (ValueError, TypeError) as e:
            self._probe.service_unavailable(
                _SERVICE, "create_auction", reason="malformed auction id"
            )
            raise RemoteUnavailableError(_SERVICE, "malformed auction id") from e

    async def place_bid(
        self, auction_id: AuctionId, bidder_id: UserId, amount: float
    ) -> None:
        path = f"/{auction_id.value}/{bidder_id.value}/{_format_amount(amount)}"
        response = await self._send("place_bid", "GET", path)
        if response.is_client_error:
            raise BidRejectedError(self._rejection_detail("place_bid", response))

    async def retract_bid(self, auction_id: AuctionId, bidder_id: UserId) -> None:
        path = f"/{auction_id.value}/{bidder_id.value}"
        response = await self._send("retract_bid", "POST", path)
        if response.is_client_error:
            raise NoStandingBidError(self._rejection_detail("retract_bid", response))

    async def fetch_auction(self, auction_id: AuctionId) -> AuctionView:
        response = await self._send(
            "fetch_auction", "GET", f"/Enchere/{auction_id.value}"
        )
        if response.is_client_error:
            detail = self._rejection_detail("fetch_auction", response)
            if response.status_code == 404:
                raise AuctionNotFoundError(f"Auction {auction_id.value} not found")
            raise RemoteUnavailableError(_SERVICE, detail)

        try:
            return AuctionView.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            self._probe.service_unavailable(
                _SERVICE, "fetch_auction", reason="malformed auction"
            )
            raise RemoteUnavailableError(_SERVICE, "malformed auction") from e
