"""Value objects for the accounts domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from ulid import ULID


@dataclass(frozen=True)
class UserId:
    """Identifier for a User aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> UserId:
        """Generate a new UserId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from string value.

        Args:
            value: ULID string

        Returns:
            UserId instance

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid UserId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class AuctionId:
    """Identifier of an auction owned by the remote Auction service.

    The Auction service issues positive integer identifiers; this context
    only ever references them.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"Invalid AuctionId: {self.value!r}")
        if self.value <= 0:
            raise ValueError(f"Invalid AuctionId: {self.value}")

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)

    @classmethod
    def from_string(cls, value: str) -> AuctionId:
        """Create AuctionId from its decimal string form.

        Raises:
            ValueError: If value is not a positive integer
        """
        try:
            return cls(value=int(value))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid AuctionId: {value}") from e


@dataclass(frozen=True)
class ItemId:
    """Identifier of a collectible item owned by the remote Item service."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"Invalid ItemId: {self.value!r}")
        if self.value <= 0:
            raise ValueError(f"Invalid ItemId: {self.value}")

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)

    @classmethod
    def from_string(cls, value: str) -> ItemId:
        """Create ItemId from its decimal string form.

        Raises:
            ValueError: If value is not a positive integer
        """
        try:
            return cls(value=int(value))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid ItemId: {value}") from e


class UserRole(StrEnum):
    """Closed set of account roles.

    USER is the standard role given at registration. ADMIN is the
    privileged role allowed to manage other accounts.
    """

    USER = "user"
    ADMIN = "admin"
