"""Unit tests for the /users HTTP routes.

Services are mocked; the tests check status codes, the mapping of errors
to HTTP responses, and the self-or-admin guard.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from accounts.application.services import AccountService, BiddingService
from accounts.application.value_objects import (
    AbandonBidResult,
    CurrentUser,
    LiquidationResult,
    PlaceBidResult,
)
from accounts.domain.aggregates import User
from accounts.domain.exceptions import InsufficientFundsError, NotOwnedError
from accounts.domain.value_objects import AuctionId, ItemId, UserId, UserRole
from accounts.ports.exceptions import (
    AuctionRejectedError,
    BidRejectedError,
    DuplicateUserError,
    InvalidCredentialsError,
    NoStandingBidError,
    RemoteUnavailableError,
    UnauthorizedError,
    UserNotFoundError,
)
from shared_kernel.auth import AccessToken


@pytest.fixture
def mock_account_service() -> AsyncMock:
    """Mock AccountService for testing."""
    return AsyncMock(spec=AccountService)


@pytest.fixture
def mock_bidding_service() -> AsyncMock:
    """Mock BiddingService for testing."""
    return AsyncMock(spec=BiddingService)


@pytest.fixture
def mock_current_user() -> CurrentUser:
    """Mock CurrentUser for authentication."""
    return CurrentUser(
        user_id=UserId.generate(), username="ash", role=UserRole.USER
    )


@pytest.fixture
def test_client(
    mock_account_service: AsyncMock,
    mock_bidding_service: AsyncMock,
    mock_current_user: CurrentUser,
) -> TestClient:
    """Create TestClient with mocked dependencies."""
    from accounts.dependencies.authentication import get_current_user
    from accounts.dependencies.services import (
        get_account_service,
        get_bidding_service,
    )
    from accounts.presentation.routes import router

    app = FastAPI()

    app.dependency_overrides[get_account_service] = lambda: mock_account_service
    app.dependency_overrides[get_bidding_service] = lambda: mock_bidding_service
    app.dependency_overrides[get_current_user] = lambda: mock_current_user

    app.include_router(router)

    return TestClient(app)


def _user(user_id: UserId, **overrides) -> User:
    fields = dict(
        id=user_id,
        username="ash",
        email="ash@example.com",
        password_hash="$2b$12$secret",
    )
    fields.update(overrides)
    return User(**fields)


class TestRegister:
    """Tests for POST /users/register."""

    def test_returns_created_user_without_hash(
        self, test_client: TestClient, mock_account_service: AsyncMock
    ) -> None:
        user = User.register("ash", "ash@example.com", "$2b$12$secret", 1000)
        mock_account_service.register.return_value = user

        response = test_client.post(
            "/users/register",
            json={"username": "ash", "email": "ash@example.com", "password": "pw"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["id"] == user.id.value
        assert body["limcoins"] == 1000
        assert "password_hash" not in body
        assert "$2b$" not in response.text

    def test_anonymous_caller_has_no_role(
        self, test_client: TestClient, mock_account_service: AsyncMock
    ) -> None:
        mock_account_service.register.return_value = User.register(
            "ash", "ash@example.com", "h", 1000
        )

        test_client.post(
            "/users/register",
            json={"username": "ash", "email": "ash@example.com", "password": "pw"},
        )

        assert mock_account_service.register.call_args.kwargs["caller_role"] is None

    def test_duplicate_returns_409(
        self, test_client: TestClient, mock_account_service: AsyncMock
    ) -> None:
        mock_account_service.register.side_effect = DuplicateUserError(
            "username", "ash"
        )

        response = test_client.post(
            "/users/register",
            json={"username": "ash", "email": "ash@example.com", "password": "pw"},
        )

        assert response.status_code == status.HTTP_409_CONFLICT


class TestLogin:
    """Tests for POST /users/login."""

    def test_returns_token(
        self, test_client: TestClient, mock_account_service: AsyncMock
    ) -> None:
        mock_account_service.authenticate.return_value = AccessToken(
            token="jwt", expires_at=datetime.now(timezone.utc)
        )

        response = test_client.post(
            "/users/login", json={"username": "ash", "password": "pw"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["access_token"] == "jwt"
        assert response.json()["token_type"] == "bearer"

    def test_bad_credentials_return_401(
        self, test_client: TestClient, mock_account_service: AsyncMock
    ) -> None:
        mock_account_service.authenticate.side_effect = InvalidCredentialsError(
            "Invalid username or password."
        )

        response = test_client.post(
            "/users/login", json={"username": "ash", "password": "nope"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestAdministration:
    """Tests for admin-only routes."""

    def test_list_users_passes_caller_role(
        self,
        test_client: TestClient,
        mock_account_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_account_service.list_users.return_value = []

        response = test_client.get("/users")

        assert response.status_code == status.HTTP_200_OK
        mock_account_service.list_users.assert_called_once_with(
            caller_role=mock_current_user.role
        )

    def test_non_admin_gets_403(
        self, test_client: TestClient, mock_account_service: AsyncMock
    ) -> None:
        mock_account_service.top_users_by_balance.side_effect = UnauthorizedError(
            "Only admins can view the leaderboard"
        )

        response = test_client.get("/users/top-limcoins")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_returns_204(
        self, test_client: TestClient, mock_account_service: AsyncMock
    ) -> None:
        response = test_client.delete(f"/users/{UserId.generate().value}")

        assert response.status_code == status.HTTP_204_NO_CONTENT

    def test_delete_unknown_returns_404(
        self, test_client: TestClient, mock_account_service: AsyncMock
    ) -> None:
        user_id = UserId.generate()
        mock_account_service.delete_user.side_effect = UserNotFoundError(user_id.value)

        response = test_client.delete(f"/users/{user_id.value}")

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestGetUser:
    """Tests for GET /users/{id}."""

    def test_self_can_read(
        self,
        test_client: TestClient,
        mock_account_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_account_service.get_user.return_value = _user(mock_current_user.user_id)

        response = test_client.get(f"/users/{mock_current_user.user_id.value}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["username"] == "ash"

    def test_other_user_is_forbidden(
        self, test_client: TestClient, mock_account_service: AsyncMock
    ) -> None:
        response = test_client.get(f"/users/{UserId.generate().value}")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        mock_account_service.get_user.assert_not_called()

    def test_invalid_id_returns_400(self, test_client: TestClient) -> None:
        response = test_client.get("/users/not-a-ulid")

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestCoins:
    """Tests for the soft coin routes."""

    def test_refused_debit_is_200_with_false(
        self,
        test_client: TestClient,
        mock_account_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_account_service.deduct_coins.return_value = False

        response = test_client.post(
            f"/users/{mock_current_user.user_id.value}/deduct-coins",
            params={"amount": 5000},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": False}

    def test_add_coins(
        self,
        test_client: TestClient,
        mock_account_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_account_service.add_coins.return_value = True

        response = test_client.post(
            f"/users/{mock_current_user.user_id.value}/add-coins",
            params={"amount": 5},
        )

        assert response.json() == {"success": True}
        mock_account_service.add_coins.assert_called_once_with(
            mock_current_user.user_id, 5
        )


class TestBidRoutes:
    """Tests for the bid orchestration routes."""

    def test_place_bid(
        self,
        test_client: TestClient,
        mock_bidding_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_bidding_service.place_bid.return_value = PlaceBidResult(
            auction_id=AuctionId(value=3), newly_active=True
        )

        response = test_client.post(
            f"/users/{mock_current_user.user_id.value}/bids/3",
            params={"amount": 50},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["newly_active"] is True
        mock_bidding_service.place_bid.assert_called_once_with(
            mock_current_user.user_id, AuctionId(value=3), 50.0
        )

    @pytest.mark.parametrize(
        "error,expected",
        [
            (BidRejectedError("too low"), 422),
            (RemoteUnavailableError("Auction", "timeout"), 503),
            (InsufficientFundsError(balance=1, requested=5), 400),
        ],
    )
    def test_place_bid_errors(
        self,
        test_client: TestClient,
        mock_bidding_service: AsyncMock,
        mock_current_user: CurrentUser,
        error: Exception,
        expected: int,
    ) -> None:
        mock_bidding_service.place_bid.side_effect = error

        response = test_client.post(
            f"/users/{mock_current_user.user_id.value}/bids/3",
            params={"amount": 50},
        )

        assert response.status_code == expected

    def test_rejected_bid_detail_is_remote_text(
        self,
        test_client: TestClient,
        mock_bidding_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_bidding_service.place_bid.side_effect = BidRejectedError(
            "Auction is closed"
        )

        response = test_client.post(
            f"/users/{mock_current_user.user_id.value}/bids/3",
            params={"amount": 50},
        )

        assert response.json()["detail"] == "Auction is closed"

    def test_abandon_inactive_bid_is_200(
        self,
        test_client: TestClient,
        mock_bidding_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_bidding_service.abandon_bid.return_value = AbandonBidResult(
            auction_id=AuctionId(value=3), was_active=False, removed=False
        )

        response = test_client.delete(
            f"/users/{mock_current_user.user_id.value}/bids/3"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == (
            "Auction with ID 3 not found in user's active bids."
        )

    def test_abandon_without_standing_bid_is_409(
        self,
        test_client: TestClient,
        mock_bidding_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_bidding_service.abandon_bid.side_effect = NoStandingBidError("none")

        response = test_client.delete(
            f"/users/{mock_current_user.user_id.value}/bids/3"
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_invalid_auction_id_is_400(
        self,
        test_client: TestClient,
        mock_current_user: CurrentUser,
    ) -> None:
        response = test_client.post(
            f"/users/{mock_current_user.user_id.value}/bids/0",
            params={"amount": 50},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_active_bids(
        self,
        test_client: TestClient,
        mock_bidding_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_bidding_service.get_active_bids.return_value = [
            AuctionId(value=1),
            AuctionId(value=2),
        ]

        response = test_client.get(f"/users/{mock_current_user.user_id.value}/bids")

        assert response.json() == {"ids": [1, 2]}


class TestAuctionRoutes:
    """Tests for auction creation routes."""

    def test_create_auction(
        self,
        test_client: TestClient,
        mock_bidding_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_bidding_service.create_auction.return_value = AuctionId(value=17)

        response = test_client.post(
            f"/users/{mock_current_user.user_id.value}/auctions",
            json={"item_id": 25, "starting_price": 100},
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json() == {"auction_id": 17}

    def test_create_auction_rejected(
        self,
        test_client: TestClient,
        mock_bidding_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_bidding_service.create_auction.side_effect = AuctionRejectedError("no")

        response = test_client.post(
            f"/users/{mock_current_user.user_id.value}/auctions",
            json={"item_id": 25, "starting_price": 100},
        )

        assert response.status_code == 422


class TestLiquidation:
    """Tests for POST /users/{id}/items/{itemId}/sell."""

    def test_sell_item(
        self,
        test_client: TestClient,
        mock_bidding_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_bidding_service.liquidate_item.return_value = LiquidationResult(
            item_id=ItemId(value=25), market_value=12.7, credited=12, balance=1012
        )

        response = test_client.post(
            f"/users/{mock_current_user.user_id.value}/items/25/sell"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["credited"] == 12
        assert response.json()["limcoins"] == 1012

    def test_sell_unowned_item_is_400(
        self,
        test_client: TestClient,
        mock_bidding_service: AsyncMock,
        mock_current_user: CurrentUser,
    ) -> None:
        mock_bidding_service.liquidate_item.side_effect = NotOwnedError(
            ItemId(value=25)
        )

        response = test_client.post(
            f"/users/{mock_current_user.user_id.value}/items/25/sell"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestAdminActsForOthers:
    """Admins pass the self-or-admin guard for any account."""

    def test_admin_reads_other_user(
        self, mock_account_service: AsyncMock, mock_bidding_service: AsyncMock
    ) -> None:
        from accounts.dependencies.authentication import get_current_user
        from accounts.dependencies.services import (
            get_account_service,
            get_bidding_service,
        )
        from accounts.presentation.routes import router

        admin = CurrentUser(
            user_id=UserId.generate(), username="oak", role=UserRole.ADMIN
        )
        other = UserId.generate()
        mock_account_service.get_user.return_value = _user(other, username="gary")

        app = FastAPI()
        app.dependency_overrides[get_account_service] = lambda: mock_account_service
        app.dependency_overrides[get_bidding_service] = lambda: mock_bidding_service
        app.dependency_overrides[get_current_user] = lambda: admin
        app.include_router(router)

        response = TestClient(app).get(f"/users/{other.value}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["username"] == "gary"
