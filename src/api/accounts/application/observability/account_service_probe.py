"""Protocol for account service observability.

Defines the interface for domain probes that capture application-level
domain events for registration, authentication, administration and
coin adjustment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AccountServiceProbe(Protocol):
    """Domain probe for account service operations."""

    def user_registered(self, user_id: str, username: str, role: str) -> None:
        """Record that a new account was registered."""
        ...

    def registration_failed(self, username: str, error: str) -> None:
        """Record that registration failed."""
        ...

    def user_authenticated(self, user_id: str, username: str) -> None:
        """Record a successful login."""
        ...

    def authentication_failed(self, username: str, reason: str) -> None:
        """Record a failed login."""
        ...

    def user_updated(self, user_id: str, fields: list[str]) -> None:
        """Record that an administrator updated a user."""
        ...

    def user_deleted(self, user_id: str, orphaned_active_bids: int) -> None:
        """Record that a user was deleted."""
        ...

    def access_denied(self, operation: str, caller_role: str) -> None:
        """Record that the caller's role did not permit an operation."""
        ...

    def coins_adjusted(self, user_id: str, delta: int, balance: int) -> None:
        """Record that a user's balance was adjusted."""
        ...

    def coin_adjustment_rejected(self, user_id: str, delta: int, reason: str) -> None:
        """Record that a soft coin adjustment was refused."""
        ...

    def item_added(self, user_id: str, item_id: int) -> None:
        """Record that an item was added to a user's inventory."""
        ...

    def with_context(self, context: ObservationContext) -> AccountServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAccountServiceProbe:
    """Default implementation of AccountServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAccountServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultAccountServiceProbe(logger=self._logger, context=context)

    def user_registered(self, user_id: str, username: str, role: str) -> None:
        """Record that a new account was registered."""
        self._logger.info(
            "user_registered",
            user_id=user_id,
            username=username,
            role=role,
            **self._get_context_kwargs(),
        )

    def registration_failed(self, username: str, error: str) -> None:
        """Record that registration failed."""
        self._logger.warning(
            "registration_failed",
            username=username,
            error=error,
            **self._get_context_kwargs(),
        )

    def user_authenticated(self, user_id: str, username: str) -> None:
        """Record a successful login."""
        self._logger.info(
            "user_authenticated",
            user_id=user_id,
            username=username,
            **self._get_context_kwargs(),
        )

    def authentication_failed(self, username: str, reason: str) -> None:
        """Record a failed login."""
        self._logger.warning(
            "authentication_failed",
            username=username,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def user_updated(self, user_id: str, fields: list[str]) -> None:
        """Record that an administrator updated a user."""
        self._logger.info(
            "user_updated",
            user_id=user_id,
            fields=fields,
            **self._get_context_kwargs(),
        )

    def user_deleted(self, user_id: str, orphaned_active_bids: int) -> None:
        """Record that a user was deleted.

        The Auction service is not told about the deletion, so any active
        bids are left behind there. The count is logged to make that visible.
        """
        log = self._logger.warning if orphaned_active_bids else self._logger.info
        log(
            "user_deleted",
            user_id=user_id,
            orphaned_active_bids=orphaned_active_bids,
            **self._get_context_kwargs(),
        )

    def access_denied(self, operation: str, caller_role: str) -> None:
        """Record that the caller's role did not permit an operation."""
        self._logger.warning(
            "access_denied",
            operation=operation,
            caller_role=caller_role,
            **self._get_context_kwargs(),
        )

    def coins_adjusted(self, user_id: str, delta: int, balance: int) -> None:
        """Record that a user's balance was adjusted."""
        self._logger.info(
            "coins_adjusted",
            user_id=user_id,
            delta=delta,
            balance=balance,
            **self._get_context_kwargs(),
        )

    def coin_adjustment_rejected(self, user_id: str, delta: int, reason: str) -> None:
        """Record that a soft coin adjustment was refused."""
        self._logger.info(
            "coin_adjustment_rejected",
            user_id=user_id,
            delta=delta,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def item_added(self, user_id: str, item_id: int) -> None:
        """Record that an item was added to a user's inventory."""
        self._logger.info(
            "item_added",
            user_id=user_id,
            item_id=item_id,
            **self._get_context_kwargs(),
        )
