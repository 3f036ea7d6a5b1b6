"""Shared fixtures for accounts unit tests.

InMemoryUserRepository stores deep copies of aggregates and enforces the
same version check as the database-backed repository. It yields to the
event loop on every call so that concurrent workflows interleave the way
they would against a real database.
"""

from __future__ import annotations

import asyncio
import copy
from unittest.mock import AsyncMock, MagicMock, create_autospec

import pytest

from accounts.domain.aggregates import User
from accounts.domain.value_objects import UserId
from accounts.infrastructure.locking import KeyedUserLock
from accounts.ports.exceptions import ConcurrentModificationError, DuplicateUserError
from accounts.ports.gateways import IAuctionGateway, IValuationGateway


class InMemoryUserRepository:
    """Dict-backed IUserRepository for service tests."""

    def __init__(self) -> None:
        self.rows: dict[str, User] = {}
        self.save_calls = 0

    async def save(self, user: User) -> None:
        await asyncio.sleep(0)
        self.save_calls += 1
        stored = self.rows.get(user.id.value)
        if stored is not None and stored.version != user.version:
            raise ConcurrentModificationError(user.id.value)
        for other in self.rows.values():
            if other.id == user.id:
                continue
            if other.username == user.username:
                raise DuplicateUserError("username", user.username)
            if other.email == user.email:
                raise DuplicateUserError("email", user.email)
        user.version += 1
        self.rows[user.id.value] = copy.deepcopy(user)

    async def get_by_id(self, user_id: UserId) -> User | None:
        await asyncio.sleep(0)
        stored = self.rows.get(user_id.value)
        return copy.deepcopy(stored) if stored else None

    async def get_by_username(self, username: str) -> User | None:
        await asyncio.sleep(0)
        for stored in self.rows.values():
            if stored.username == username:
                return copy.deepcopy(stored)
        return None

    async def get_by_email(self, email: str) -> User | None:
        await asyncio.sleep(0)
        for stored in self.rows.values():
            if stored.email == email:
                return copy.deepcopy(stored)
        return None

    async def list_all(self) -> list[User]:
        return [
            copy.deepcopy(u) for u in sorted(self.rows.values(), key=lambda u: u.username)
        ]

    async def list_top_by_balance(self, limit: int) -> list[User]:
        ranked = sorted(self.rows.values(), key=lambda u: -u.balance)
        return [copy.deepcopy(u) for u in ranked[:limit]]

    async def delete(self, user: User) -> bool:
        return self.rows.pop(user.id.value, None) is not None


@pytest.fixture
def mock_session():
    """Create mock async session whose begin() works as an async context manager."""
    session = AsyncMock()
    mock_transaction = MagicMock()
    mock_transaction.__aenter__ = AsyncMock(return_value=None)
    mock_transaction.__aexit__ = AsyncMock(return_value=None)
    session.begin = MagicMock(return_value=mock_transaction)
    return session


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    """Create an empty in-memory user repository."""
    return InMemoryUserRepository()


@pytest.fixture
def user_lock() -> KeyedUserLock:
    """Create a real per-user lock table."""
    return KeyedUserLock()


@pytest.fixture
def mock_auction_gateway():
    """Create mock Auction service gateway."""
    return create_autospec(IAuctionGateway, instance=True)


@pytest.fixture
def mock_valuation_gateway():
    """Create mock Item service gateway."""
    return create_autospec(IValuationGateway, instance=True)


@pytest.fixture
def make_user(user_repository: InMemoryUserRepository):
    """Factory that stores a user with the given balance, items and bids."""

    def _make(
        username: str = "ash",
        balance: int = 1000,
        items=(),
        active_bids=(),
        created_auctions=(),
    ) -> User:
        from accounts.domain.bid_roster import BidRoster
        from accounts.domain.inventory import Inventory
        from accounts.domain.ledger import Ledger

        user = User(
            id=UserId.generate(),
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
            ledger=Ledger(balance=balance),
            inventory=Inventory(items),
            roster=BidRoster(
                active_bids=active_bids, created_auctions=created_auctions
            ),
            version=1,
        )
        user_repository.rows[user.id.value] = copy.deepcopy(user)
        return user

    return _make
