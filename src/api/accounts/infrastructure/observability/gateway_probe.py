"""Domain probe for remote gateway operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to calls made to the Auction and Item
services.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RemoteGatewayProbe(Protocol):
    """Domain probe for remote service calls.

    Records domain events during calls to remote services.
    """

    def call_started(self, service: str, operation: str, path: str) -> None:
        """Record that a remote call was issued."""
        ...

    def call_succeeded(
        self, service: str, operation: str, status_code: int, elapsed_ms: float
    ) -> None:
        """Record that a remote call succeeded."""
        ...

    def call_rejected(
        self, service: str, operation: str, status_code: int, detail: str
    ) -> None:
        """Record that the remote service refused the request."""
        ...

    def service_unavailable(
        self, service: str, operation: str, reason: str, status_code: int | None = None
    ) -> None:
        """Record that the remote service could not serve the request."""
        ...

    def with_context(self, context: ObservationContext) -> RemoteGatewayProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRemoteGatewayProbe:
    """Default implementation of RemoteGatewayProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRemoteGatewayProbe:
        """Create a new probe with observation context bound."""
        return DefaultRemoteGatewayProbe(logger=self._logger, context=context)

    def call_started(self, service: str, operation: str, path: str) -> None:
        """Record that a remote call was issued."""
        self._logger.debug(
            "remote_call_started",
            service=service,
            operation=operation,
            path=path,
            **self._get_context_kwargs(),
        )

    def call_succeeded(
        self, service: str, operation: str, status_code: int, elapsed_ms: float
    ) -> None:
        """Record that a remote call succeeded."""
        self._logger.info(
            "remote_call_succeeded",
            service=service,
            operation=operation,
            status_code=status_code,
            elapsed_ms=round(elapsed_ms, 2),
            **self._get_context_kwargs(),
        )

    def call_rejected(
        self, service: str, operation: str, status_code: int, detail: str
    ) -> None:
        """Record that the remote service refused the request."""
        self._logger.warning(
            "remote_call_rejected",
            service=service,
            operation=operation,
            status_code=status_code,
            detail=detail,
            **self._get_context_kwargs(),
        )

    def service_unavailable(
        self, service: str, operation: str, reason: str, status_code: int | None = None
    ) -> None:
        """Record that the remote service could not serve the request."""
        self._logger.error(
            "remote_service_unavailable",
            service=service,
            operation=operation,
            reason=reason,
            status_code=status_code,
            **self._get_context_kwargs(),
        )
