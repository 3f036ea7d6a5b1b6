"""SQLAlchemy implementation of IUserRepository.

Stores each User aggregate as one row of the users table. The repository only
flushes; committing is left to the application service that owns the
transaction.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from accounts.domain.aggregates import User
from accounts.domain.bid_roster import BidRoster
from accounts.domain.inventory import Inventory
from accounts.domain.ledger import Ledger
from accounts.domain.value_objects import AuctionId, ItemId, UserId, UserRole
from accounts.infrastructure.models import UserModel
from accounts.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from accounts.ports.exceptions import ConcurrentModificationError, DuplicateUserError
from accounts.ports.repositories import IUserRepository

# Unique constraint name (see Base naming convention) -> duplicated field
_UNIQUE_FIELDS = {
    "uq_users_email": "email",
    "uq_users_username": "username",
}


def _duplicated_field(error: IntegrityError) -> str | None:
    message = str(error.orig)
    for constraint, field in _UNIQUE_FIELDS.items():
        if constraint in message:
            return field
    return None


class UserRepository(IUserRepository):
    """Database-backed repository for User aggregates.

    Optimistic concurrency is enforced twice: save() compares the aggregate's
    version with the loaded row, and the version_id_col on UserModel makes the
    UPDATE itself fail if another process wrote the row in between.
    """

    def __init__(
        self, session: AsyncSession, probe: UserRepositoryProbe | None = None
    ) -> None:
        """Initialize repository with database session and probe.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def save(self, user: User) -> None:
        """Persist a user aggregate.

        Creates a new user or updates an existing one, then writes the new
        stored version back onto the aggregate.

        Args:
            user: The User aggregate to persist

        Raises:
            DuplicateUserError: If username or email is already taken
            ConcurrentModificationError: If the stored version moved on
        """
        stmt = select(UserModel).where(UserModel.id == user.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model:
            if model.version != user.version:
                self._probe.concurrent_modification(user.id.value, user.version)
                raise ConcurrentModificationError(user.id.value)
            model.username = user.username
            model.email = user.email
            model.password_hash = user.password_hash
            model.role = user.role.value
            model.balance = user.ledger.balance
            model.items = [item.value for item in user.inventory.items]
            model.active_bids = [a.value for a in user.roster.active_bids]
            model.created_auctions = [a.value for a in user.roster.created_auctions]
        else:
            model = UserModel(
                id=user.id.value,
                username=user.username,
                email=user.email,
                password_hash=user.password_hash,
                role=user.role.value,
                balance=user.ledger.balance,
                items=[item.value for item in user.inventory.items],
                active_bids=[a.value for a in user.roster.active_bids],
                created_auctions=[a.value for a in user.roster.created_auctions],
            )
            self._session.add(model)

        try:
            await self._session.flush()
        except IntegrityError as e:
            field = _duplicated_field(e)
            if field is None:
                raise
            value = user.email if field == "email" else user.username
            self._probe.duplicate_user(field, value)
            raise DuplicateUserError(field, value) from e
        except StaleDataError as e:
            self._probe.concurrent_modification(user.id.value, user.version)
            raise ConcurrentModificationError(user.id.value) from e

        user.version = model.version
        self._probe.user_saved(user.id.value, user.username, user.version)

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by their ID.

        Args:
            user_id: The unique identifier of the user

        Returns:
            The User aggregate, or None if not found
        """
        stmt = select(UserModel).where(UserModel.id == user_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.user_not_found(user_id.value)
            return None

        self._probe.user_retrieved(user_id.value)
        return self._to_domain(model)

    async def get_by_username(self, username: str) -> User | None:
        """Retrieve a user by their username.

        Args:
            username: The username to search for

        Returns:
            The User aggregate, or None if not found
        """
        stmt = select(UserModel).where(UserModel.username == username)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.username_not_found(username)
            return None

        self._probe.user_retrieved(model.id)
        return self._to_domain(model)

    async def get_by_email(self, email: str) -> User | None:
        """Retrieve a user by their email address."""
        stmt = select(UserModel).where(UserModel.email == email)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    async def list_all(self) -> list[User]:
        """List all users ordered by username."""
        stmt = select(UserModel).order_by(UserModel.username)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def list_top_by_balance(self, limit: int) -> list[User]:
        """List the richest users, highest balance first."""
        stmt = (
            select(UserModel)
            .order_by(UserModel.balance.desc(), UserModel.username)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def delete(self, user: User) -> bool:
        """Delete a user.

        Args:
            user: The User aggregate to delete

        Returns:
            True if deleted, False if not found
        """
        stmt = select(UserModel).where(UserModel.id == user.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()

        self._probe.user_deleted(user.id.value)
        return True

    def _to_domain(self, model: UserModel) -> User:
        """Rebuild a User aggregate from its row.

        Duplicate roster entries in stored data collapse to one.
        """
        return User(
            id=UserId(value=model.id),
            username=model.username,
            email=model.email,
            password_hash=model.password_hash,
            role=UserRole(model.role),
            ledger=Ledger(balance=model.balance),
            inventory=Inventory(ItemId(value=i) for i in model.items or []),
            roster=BidRoster(
                active_bids=(AuctionId(value=a) for a in model.active_bids or []),
                created_auctions=(
                    AuctionId(value=a) for a in model.created_auctions or []
                ),
            ),
            version=model.version,
        )
