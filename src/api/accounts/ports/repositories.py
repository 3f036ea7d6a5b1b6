"""Repository protocols (ports) for the accounts bounded context.

Repository protocols define the interface for persisting and retrieving
aggregates. Repositories never open transactions themselves; the
application services own the transaction boundary.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from accounts.domain.aggregates import User
from accounts.domain.value_objects import UserId


@runtime_checkable
class IUserRepository(Protocol):
    """Repository for User aggregate persistence.

    Returns fully hydrated User aggregates (ledger, inventory and rosters
    included). Uniqueness of username and email is enforced by the store.
    """

    async def save(self, user: User) -> None:
        """Persist a user aggregate.

        Creates a new user or updates an existing one. On update the stored
        version must match user.version; the stored version is then bumped
        and written back onto the aggregate.

        Args:
            user: The User aggregate to persist

        Raises:
            DuplicateUserError: If username or email is already taken
            ConcurrentModificationError: If the stored version moved on
        """
        ...

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by their ID.

        Args:
            user_id: The unique identifier of the user

        Returns:
            The User aggregate, or None if not found
        """
        ...

    async def get_by_username(self, username: str) -> User | None:
        """Retrieve a user by their username.

        Args:
            username: The username to search for

        Returns:
            The User aggregate, or None if not found
        """
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Retrieve a user by their email address.

        Args:
            email: The email address to search for

        Returns:
            The User aggregate, or None if not found
        """
        ...

    async def list_all(self) -> list[User]:
        """List all users ordered by username."""
        ...

    async def list_top_by_balance(self, limit: int) -> list[User]:
        """List the richest users.

        Args:
            limit: Maximum number of users to return

        Returns:
            Users ordered by balance, highest first
        """
        ...

    async def delete(self, user: User) -> bool:
        """Delete a user.

        Does not touch the Auction service's view of the user's bids.

        Args:
            user: The User aggregate to delete

        Returns:
            True if deleted, False if not found
        """
        ...
