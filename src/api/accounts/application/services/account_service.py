"""Account application service for the accounts bounded context.

Handles the workflows that touch only the local User store: registration,
login, administration, soft coin adjustments and inventory grants. None of
them calls a remote service; they all follow "validate, mutate, persist".
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from accounts.application.observability import (
    AccountServiceProbe,
    DefaultAccountServiceProbe,
)
from accounts.application.security import (
    MAX_PASSWORD_BYTES,
    hash_password,
    verify_password,
)
from accounts.domain.aggregates import User
from accounts.domain.exceptions import InsufficientFundsError, InvalidAmountError
from accounts.domain.value_objects import ItemId, UserId, UserRole
from accounts.ports.exceptions import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidRegistrationError,
    UnauthorizedError,
    UserNotFoundError,
)
from accounts.ports.locking import IUserLock
from accounts.ports.repositories import IUserRepository
from shared_kernel.auth import AccessToken, JWTService


class AccountService:
    """Application service for account management.

    Admin-only operations take the caller's role as an explicit argument
    instead of reading it from the request.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_repository: IUserRepository,
        user_lock: IUserLock,
        jwt_service: JWTService,
        starting_grant: int = 1000,
        probe: AccountServiceProbe | None = None,
    ):
        """Initialize AccountService with dependencies.

        Args:
            session: Database session for transaction management
            user_repository: Repository for user persistence
            user_lock: Per-user mutual exclusion
            jwt_service: Token issuer used by authenticate()
            starting_grant: LimCoins given to every new account
            probe: Optional domain probe for observability
        """
        self._session = session
        self._user_repository = user_repository
        self._user_lock = user_lock
        self._jwt_service = jwt_service
        self._starting_grant = starting_grant
        self._probe = probe or DefaultAccountServiceProbe()

    def _require_admin(self, operation: str, caller_role: UserRole) -> None:
        if caller_role != UserRole.ADMIN:
            self._probe.access_denied(operation=operation, caller_role=caller_role)
            raise UnauthorizedError(f"Only admins can {operation}")

    async def _load(self, user_id: UserId) -> User:
        user = await self._user_repository.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id.value)
        return user

    async def _check_unique(
        self, username: str | None, email: str | None, exclude: UserId | None = None
    ) -> None:
        if username is not None:
            existing = await self._user_repository.get_by_username(username)
            if existing is not None and existing.id != exclude:
                raise DuplicateUserError("username", username)
        if email is not None:
            existing = await self._user_repository.get_by_email(email)
            if existing is not None and existing.id != exclude:
                raise DuplicateUserError("email", email)

    async def register(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
        role: UserRole | None = None,
        caller_role: UserRole | None = None,
    ) -> User:
        """Register a new account.

        Manages database transaction for the entire use case.

        Args:
            username: Requested unique handle
            email: Requested unique contact address
            password: Plaintext password, hashed before storage
            role: Requested role (defaults to USER)
            caller_role: Role of the authenticated caller, if any

        Returns:
            The newly registered User aggregate

        Raises:
            InvalidRegistrationError: If a required field is missing or blank,
                or the password is longer than bcrypt accepts
            UnauthorizedError: If ADMIN is requested by a non-admin caller
            DuplicateUserError: If username or email is already taken
        """
        try:
            for field_name, value in (
                ("Username", username),
                ("Email", email),
                ("Password", password),
            ):
                if value is None or not value.strip():
                    raise InvalidRegistrationError(f"{field_name} is required.")

            if len(password.encode()) > MAX_PASSWORD_BYTES:
                raise InvalidRegistrationError(
                    f"Password must be at most {MAX_PASSWORD_BYTES} bytes."
                )

            if role == UserRole.ADMIN:
                self._require_admin("create other admins", caller_role or UserRole.USER)

            async with self._session.begin():
                await self._check_unique(username, email)
                user = User.register(
                    username=username,
                    email=email,
                    password_hash=hash_password(password),
                    starting_grant=self._starting_grant,
                    role=role,
                )
                await self._user_repository.save(user)

        except Exception as e:
            self._probe.registration_failed(username=username or "", error=str(e))
            raise

        self._probe.user_registered(
            user_id=user.id.value, username=user.username, role=user.role
        )
        return user

    async def authenticate(self, username: str, password: str) -> AccessToken:
        """Check credentials and issue a bearer token.

        Raises:
            InvalidCredentialsError: If the credentials are blank or wrong
        """
        if not username or not username.strip() or not password or not password.strip():
            self._probe.authentication_failed(username=username or "", reason="blank")
            raise InvalidCredentialsError("Username and password are required.")

        user = await self._user_repository.get_by_username(username)
        if user is None:
            self._probe.authentication_failed(username=username, reason="unknown_user")
            raise InvalidCredentialsError("Invalid username or password.")

        if not verify_password(password, user.password_hash):
            self._probe.authentication_failed(username=username, reason="bad_password")
            raise InvalidCredentialsError("Invalid username or password.")

        token = self._jwt_service.issue_token(
            sub=user.id.value, username=user.username, role=user.role
        )
        self._probe.user_authenticated(user_id=user.id.value, username=user.username)
        return token

    async def get_user(self, user_id: UserId) -> User:
        """Fetch a user.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        return await self._load(user_id)

    async def list_users(self, caller_role: UserRole) -> list[User]:
        """List every account (admin only).

        Raises:
            UnauthorizedError: If the caller is not an admin
        """
        self._require_admin("list users", caller_role)
        return await self._user_repository.list_all()

    async def top_users_by_balance(
        self, caller_role: UserRole, limit: int = 5
    ) -> list[User]:
        """List the richest accounts (admin only).

        Raises:
            UnauthorizedError: If the caller is not an admin
        """
        self._require_admin("view the leaderboard", caller_role)
        return await self._user_repository.list_top_by_balance(limit)

    async def update_user(
        self,
        user_id: UserId,
        caller_role: UserRole,
        username: str | None = None,
        email: str | None = None,
        role: UserRole | None = None,
    ) -> User:
        """Update a user's identity fields (admin only).

        Fields left as None are not changed.

        Raises:
            UnauthorizedError: If the caller is not an admin
            UserNotFoundError: If the user does not exist
            DuplicateUserError: If the new username or email is taken
        """
        self._require_admin("update users", caller_role)

        async with self._user_lock.hold(user_id):
            async with self._session.begin():
                user = await self._load(user_id)
                await self._check_unique(username, email, exclude=user_id)

                changed: list[str] = []
                if username is not None and username != user.username:
                    user.username = username
                    changed.append("username")
                if email is not None and email != user.email:
                    user.email = email
                    changed.append("email")
                if role is not None and role != user.role:
                    user.role = role
                    changed.append("role")

                if changed:
                    await self._user_repository.save(user)

        self._probe.user_updated(user_id=user_id.value, fields=changed)
        return user

    async def delete_user(self, user_id: UserId, caller_role: UserRole) -> None:
        """Delete a user (admin only).

        The Auction service is not notified; bids the user still has there
        are left in place.

        Raises:
            UnauthorizedError: If the caller is not an admin
            UserNotFoundError: If the user does not exist
        """
        self._require_admin("delete users", caller_role)

        async with self._user_lock.hold(user_id):
            async with self._session.begin():
                user = await self._load(user_id)
                deleted = await self._user_repository.delete(user)
                if not deleted:
                    raise UserNotFoundError(user_id.value)

        self._probe.user_deleted(
            user_id=user_id.value, orphaned_active_bids=len(user.roster.active_bids)
        )

    async def add_coins(self, user_id: UserId, amount: int) -> bool:
        """Credit LimCoins to a user.

        Soft-failure contract: returns False instead of raising when the
        user does not exist or the amount is negative.

        Returns:
            True if the balance was credited
        """
        return await self._adjust(user_id, amount)

    async def deduct_coins(self, user_id: UserId, amount: int) -> bool:
        """Debit LimCoins from a user.

        Soft-failure contract: returns False instead of raising when the
        user does not exist, the amount is negative, or funds are
        insufficient. A refused debit leaves the balance unchanged.

        Returns:
            True if the balance was debited
        """
        return await self._adjust(user_id, -amount if amount >= 0 else None)

    async def _adjust(self, user_id: UserId, delta: int | None) -> bool:
        if delta is None:
            self._probe.coin_adjustment_rejected(
                user_id=user_id.value, delta=0, reason="negative_amount"
            )
            return False

        async with self._user_lock.hold(user_id):
            async with self._session.begin():
                user = await self._user_repository.get_by_id(user_id)
                if user is None:
                    self._probe.coin_adjustment_rejected(
                        user_id=user_id.value, delta=delta, reason="user_not_found"
                    )
                    return False

                try:
                    if delta >= 0:
                        user.ledger.credit(delta)
                    else:
                        user.ledger.debit(-delta)
                except (InsufficientFundsError, InvalidAmountError) as e:
                    self._probe.coin_adjustment_rejected(
                        user_id=user_id.value, delta=delta, reason=str(e)
                    )
                    return False

                await self._user_repository.save(user)

        self._probe.coins_adjusted(
            user_id=user_id.value, delta=delta, balance=user.balance
        )
        return True

    async def add_item(self, user_id: UserId, item_id: ItemId) -> None:
        """Grant an item to a user's inventory.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        async with self._user_lock.hold(user_id):
            async with self._session.begin():
                user = await self._load(user_id)
                user.inventory.add(item_id)
                await self._user_repository.save(user)

        self._probe.item_added(user_id=user_id.value, item_id=item_id.value)

    async def get_items(self, user_id: UserId) -> list[ItemId]:
        """List a user's items.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self._load(user_id)
        return user.inventory.items
