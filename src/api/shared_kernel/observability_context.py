"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped metadata that should be included with all
    instrumentation events, so that a bid placed through this service can be
    correlated with the matching entry in the Auction service's logs.

    Attributes:
        request_id: Unique identifier for the current request/operation.
        caller_id: Identifier of the authenticated caller (if applicable).
        caller_role: Role of the authenticated caller (if applicable).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", caller_id="01H...")
        probe = DefaultBiddingServiceProbe().with_context(context)
    """

    request_id: str | None = None
    caller_id: str | None = None
    caller_role: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.caller_id is not None:
            result["caller_id"] = self.caller_id
        if self.caller_role is not None:
            result["caller_role"] = self.caller_role
        result.update(self.extra)
        return result

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        new_extra = {**self.extra, **kwargs}
        return ObservationContext(
            request_id=self.request_id,
            caller_id=self.caller_id,
            caller_role=self.caller_role,
            extra=new_extra,
        )
