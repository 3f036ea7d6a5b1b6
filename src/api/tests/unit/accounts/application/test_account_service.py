"""Unit tests for AccountService."""

import asyncio
from datetime import timedelta

import pytest
from unittest.mock import create_autospec

from accounts.application.observability import AccountServiceProbe
from accounts.application.security import hash_password
from accounts.application.services import AccountService
from accounts.domain.value_objects import ItemId, UserId, UserRole
from accounts.ports.exceptions import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidRegistrationError,
    UnauthorizedError,
    UserNotFoundError,
)
from shared_kernel.auth import JWTProbe, JWTService


@pytest.fixture
def mock_probe():
    """Create mock account service probe."""
    return create_autospec(AccountServiceProbe, instance=True)


@pytest.fixture
def jwt_service():
    """Create a real JWT service with a test secret."""
    return JWTService(
        secret="test-secret",
        probe=create_autospec(JWTProbe, instance=True),
        ttl=timedelta(minutes=5),
    )


@pytest.fixture
def service(mock_session, user_repository, user_lock, jwt_service, mock_probe):
    """Create AccountService with test dependencies."""
    return AccountService(
        session=mock_session,
        user_repository=user_repository,
        user_lock=user_lock,
        jwt_service=jwt_service,
        starting_grant=1000,
        probe=mock_probe,
    )


class TestRegister:
    """Tests for registration."""

    @pytest.mark.asyncio
    async def test_grants_starting_balance(self, service, user_repository, mock_probe):
        user = await service.register("ash", "ash@example.com", "pikachu")

        assert user.balance == 1000
        assert user.role == UserRole.USER
        assert user.id.value in user_repository.rows
        mock_probe.user_registered.assert_called_once()

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, service):
        user = await service.register("ash", "ash@example.com", "pikachu")
        assert user.password_hash != "pikachu"
        assert user.password_hash.startswith("$2")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username,email,password,message",
        [
            (None, "a@example.com", "pw", "Username is required."),
            ("  ", "a@example.com", "pw", "Username is required."),
            ("ash", "", "pw", "Email is required."),
            ("ash", "a@example.com", None, "Password is required."),
        ],
    )
    async def test_blank_fields_are_rejected(
        self, service, user_repository, username, email, password, message
    ):
        with pytest.raises(InvalidRegistrationError, match=message):
            await service.register(username, email, password)
        assert user_repository.rows == {}

    @pytest.mark.asyncio
    async def test_overlong_password_is_rejected(self, service, user_repository):
        with pytest.raises(InvalidRegistrationError, match="at most 72 bytes"):
            await service.register("ash", "ash@example.com", "p" * 73)
        assert user_repository.rows == {}

    @pytest.mark.asyncio
    async def test_password_length_counts_bytes(self, service, user_repository):
        """Multi-byte characters count by their UTF-8 length."""
        with pytest.raises(InvalidRegistrationError):
            await service.register("ash", "ash@example.com", "é" * 37)
        assert user_repository.rows == {}

    @pytest.mark.asyncio
    async def test_password_of_72_bytes_is_accepted(self, service):
        user = await service.register("ash", "ash@example.com", "p" * 72)
        assert user.password_hash.startswith("$2")

    @pytest.mark.asyncio
    async def test_duplicate_username_is_rejected(self, service, user_repository):
        first = await service.register("ash", "ash@example.com", "pw")
        stored_hash = user_repository.rows[first.id.value].password_hash

        with pytest.raises(DuplicateUserError) as exc_info:
            await service.register("ash", "other@example.com", "other-pw")

        assert exc_info.value.field == "username"
        assert len(user_repository.rows) == 1
        existing = user_repository.rows[first.id.value]
        assert existing.email == "ash@example.com"
        assert existing.password_hash == stored_hash
        assert existing.balance == 1000

    @pytest.mark.asyncio
    async def test_duplicate_email_is_rejected(self, service):
        await service.register("ash", "ash@example.com", "pw")

        with pytest.raises(DuplicateUserError) as exc_info:
            await service.register("gary", "ash@example.com", "pw")

        assert exc_info.value.field == "email"

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_registration_creates_one_user(
        self, service, user_repository
    ):
        """Two racing registrations for one username leave a single account."""
        results = await asyncio.gather(
            service.register("ash", "ash1@example.com", "pw"),
            service.register("ash", "ash2@example.com", "pw"),
            return_exceptions=True,
        )

        assert sum(isinstance(r, DuplicateUserError) for r in results) == 1
        assert len(user_repository.rows) == 1

    @pytest.mark.asyncio
    async def test_only_admins_create_admins(self, service, mock_probe):
        with pytest.raises(UnauthorizedError):
            await service.register(
                "brock", "brock@example.com", "pw", role=UserRole.ADMIN
            )
        mock_probe.access_denied.assert_called_once()

    @pytest.mark.asyncio
    async def test_admin_can_create_admin(self, service):
        user = await service.register(
            "brock",
            "brock@example.com",
            "pw",
            role=UserRole.ADMIN,
            caller_role=UserRole.ADMIN,
        )
        assert user.is_admin


class TestAuthenticate:
    """Tests for login."""

    @pytest.mark.asyncio
    async def test_issues_token_with_identity(self, service, jwt_service):
        user = await service.register("ash", "ash@example.com", "pikachu")

        token = await service.authenticate("ash", "pikachu")

        claims = jwt_service.validate_token(token.token)
        assert claims.sub == user.id.value
        assert claims.username == "ash"
        assert claims.role == "user"

    @pytest.mark.asyncio
    async def test_wrong_password(self, service, mock_probe):
        await service.register("ash", "ash@example.com", "pikachu")

        with pytest.raises(InvalidCredentialsError):
            await service.authenticate("ash", "raichu")

        mock_probe.authentication_failed.assert_called_once_with(
            username="ash", reason="bad_password"
        )

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        with pytest.raises(InvalidCredentialsError):
            await service.authenticate("nobody", "pw")

    @pytest.mark.asyncio
    async def test_blank_credentials(self, service):
        with pytest.raises(InvalidCredentialsError):
            await service.authenticate("", "")


class TestAdministration:
    """Tests for admin-only operations."""

    @pytest.mark.asyncio
    async def test_list_users_requires_admin(self, service):
        with pytest.raises(UnauthorizedError):
            await service.list_users(caller_role=UserRole.USER)

    @pytest.mark.asyncio
    async def test_list_users_sorted_by_username(self, service, make_user):
        make_user("misty")
        make_user("ash")

        users = await service.list_users(caller_role=UserRole.ADMIN)

        assert [u.username for u in users] == ["ash", "misty"]

    @pytest.mark.asyncio
    async def test_top_users_by_balance(self, service, make_user):
        for i, balance in enumerate([10, 500, 30, 900, 70, 20]):
            make_user(f"user{i}", balance=balance)

        top = await service.top_users_by_balance(caller_role=UserRole.ADMIN, limit=5)

        assert [u.balance for u in top] == [900, 500, 70, 30, 20]

    @pytest.mark.asyncio
    async def test_top_users_requires_admin(self, service):
        with pytest.raises(UnauthorizedError):
            await service.top_users_by_balance(caller_role=UserRole.USER)

    @pytest.mark.asyncio
    async def test_update_user_changes_fields(
        self, service, make_user, user_repository, mock_probe
    ):
        user = make_user("ash")

        updated = await service.update_user(
            user.id, caller_role=UserRole.ADMIN, email="new@example.com"
        )

        assert updated.email == "new@example.com"
        assert user_repository.rows[user.id.value].email == "new@example.com"
        mock_probe.user_updated.assert_called_once_with(
            user_id=user.id.value, fields=["email"]
        )

    @pytest.mark.asyncio
    async def test_update_user_rejects_taken_username(self, service, make_user):
        user = make_user("ash")
        make_user("misty")

        with pytest.raises(DuplicateUserError):
            await service.update_user(
                user.id, caller_role=UserRole.ADMIN, username="misty"
            )

    @pytest.mark.asyncio
    async def test_delete_user(self, service, make_user, user_repository, mock_probe):
        from accounts.domain.value_objects import AuctionId

        user = make_user("ash", active_bids=[AuctionId(value=1)])

        await service.delete_user(user.id, caller_role=UserRole.ADMIN)

        assert user.id.value not in user_repository.rows
        mock_probe.user_deleted.assert_called_once_with(
            user_id=user.id.value, orphaned_active_bids=1
        )

    @pytest.mark.asyncio
    async def test_delete_unknown_user(self, service):
        with pytest.raises(UserNotFoundError):
            await service.delete_user(UserId.generate(), caller_role=UserRole.ADMIN)

    @pytest.mark.asyncio
    async def test_delete_requires_admin(self, service, make_user, user_repository):
        user = make_user("ash")

        with pytest.raises(UnauthorizedError):
            await service.delete_user(user.id, caller_role=UserRole.USER)

        assert user.id.value in user_repository.rows


class TestCoinAdjustment:
    """Tests for the soft-failure coin operations."""

    @pytest.mark.asyncio
    async def test_add_coins(self, service, make_user, user_repository):
        user = make_user(balance=10)

        assert await service.add_coins(user.id, 5) is True
        assert user_repository.rows[user.id.value].balance == 15

    @pytest.mark.asyncio
    async def test_add_negative_coins_returns_false(
        self, service, make_user, user_repository
    ):
        user = make_user(balance=10)

        assert await service.add_coins(user.id, -5) is False
        assert user_repository.rows[user.id.value].balance == 10

    @pytest.mark.asyncio
    async def test_deduct_coins(self, service, make_user, user_repository):
        user = make_user(balance=10)

        assert await service.deduct_coins(user.id, 10) is True
        assert user_repository.rows[user.id.value].balance == 0

    @pytest.mark.asyncio
    async def test_deduct_more_than_balance_returns_false_and_keeps_balance(
        self, service, make_user, user_repository, mock_probe
    ):
        user = make_user(balance=10)

        assert await service.deduct_coins(user.id, 11) is False
        assert user_repository.rows[user.id.value].balance == 10
        assert user_repository.save_calls == 0
        mock_probe.coin_adjustment_rejected.assert_called_once()

    @pytest.mark.asyncio
    async def test_deduct_negative_returns_false(self, service, make_user):
        user = make_user(balance=10)
        assert await service.deduct_coins(user.id, -1) is False

    @pytest.mark.asyncio
    async def test_unknown_user_returns_false(self, service):
        assert await service.add_coins(UserId.generate(), 5) is False
        assert await service.deduct_coins(UserId.generate(), 5) is False

    @pytest.mark.asyncio
    async def test_concurrent_debits_never_overdraw(
        self, service, make_user, user_repository
    ):
        """Only as many debits succeed as the balance allows."""
        user = make_user(balance=30)

        results = await asyncio.gather(
            *(service.deduct_coins(user.id, 10) for _ in range(5))
        )

        assert results.count(True) == 3
        assert user_repository.rows[user.id.value].balance == 0


class TestInventory:
    """Tests for item grants."""

    @pytest.mark.asyncio
    async def test_add_item_then_list(self, service, make_user):
        user = make_user()

        await service.add_item(user.id, ItemId(value=25))
        await service.add_item(user.id, ItemId(value=4))

        assert await service.get_items(user.id) == [ItemId(value=25), ItemId(value=4)]

    @pytest.mark.asyncio
    async def test_add_item_unknown_user(self, service):
        with pytest.raises(UserNotFoundError):
            await service.add_item(UserId.generate(), ItemId(value=1))


class TestPasswordHashing:
    """Tests for the bcrypt helpers."""

    def test_verify_round_trip(self):
        from accounts.application.security import verify_password

        hashed = hash_password("secret")
        assert verify_password("secret", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_malformed_hash_does_not_verify(self):
        from accounts.application.security import verify_password

        assert verify_password("secret", "not-a-bcrypt-hash") is False
