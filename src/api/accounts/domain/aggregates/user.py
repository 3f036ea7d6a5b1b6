"""User aggregate for the accounts context."""

from __future__ import annotations

from dataclasses import dataclass, field

from accounts.domain.bid_roster import BidRoster
from accounts.domain.inventory import Inventory
from accounts.domain.ledger import Ledger
from accounts.domain.value_objects import UserId, UserRole


@dataclass
class User:
    """User aggregate: an account on the auction platform.

    The aggregate root for everything a user owns on this side of the
    platform. Its mutable state is split across three components:

    - ledger: the LimCoin balance
    - inventory: item identifiers held by the user
    - roster: auctions the user is bidding on and auctions the user listed

    Business rules:
    - username and email are unique across users (enforced by the store)
    - the balance never goes negative (enforced by the ledger)
    - the rosters never hold duplicates (enforced by the roster)

    version is an optimistic concurrency counter owned by the store. It is
    carried through the aggregate so that a stale write can be detected.
    """

    id: UserId
    username: str
    email: str
    password_hash: str
    role: UserRole = UserRole.USER
    ledger: Ledger = field(default_factory=Ledger)
    inventory: Inventory = field(default_factory=Inventory)
    roster: BidRoster = field(default_factory=BidRoster)
    version: int = 0

    @classmethod
    def register(
        cls,
        username: str,
        email: str,
        password_hash: str,
        starting_grant: int,
        role: UserRole | None = None,
    ) -> User:
        """Factory method for a newly registered account.

        Generates the ID, grants the starting balance, and defaults the role
        to USER when none is requested.

        Args:
            username: Unique handle
            email: Unique contact address
            password_hash: Already-hashed credential material
            starting_grant: LimCoins granted on registration
            role: Requested role (defaults to USER)

        Returns:
            A new User aggregate (not yet persisted)
        """
        return cls(
            id=UserId.generate(),
            username=username,
            email=email,
            password_hash=password_hash,
            role=role or UserRole.USER,
            ledger=Ledger(balance=starting_grant),
        )

    @property
    def balance(self) -> int:
        """Current LimCoin balance."""
        return self.ledger.balance

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __str__(self) -> str:
        """Return string representation."""
        return f"User({self.username})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id)
