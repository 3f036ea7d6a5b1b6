"""Port-level exceptions for the accounts bounded context.

These exceptions represent failures that occur at the boundaries of the
context: the user store and the two remote services. They should be
caught and handled by the presentation layer.
"""


class UserNotFoundError(Exception):
    """Raised when a user cannot be found in the store."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User with ID {user_id} not found")
        self.user_id = user_id


class DuplicateUserError(Exception):
    """Raised when a username or email is already taken.

    This exception indicates that the business rule of globally unique
    handles and contact addresses has been violated.
    """

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"A user with this {field} already exists: {value}")
        self.field = field
        self.value = value


class InvalidRegistrationError(ValueError):
    """Raised when required registration fields are missing or blank."""

    pass


class InvalidCredentialsError(Exception):
    """Raised when a login attempt fails.

    The message never reveals whether the username or the password was wrong.
    """

    pass


class UnauthorizedError(Exception):
    """Raised when the caller's role does not allow an operation.

    The presentation layer should return HTTP 403 without exposing
    internal details.
    """

    pass


class ConcurrentModificationError(Exception):
    """Raised when a user was modified concurrently since it was loaded.

    The store detected a version mismatch and refused the write, so no
    update was lost.
    """

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User {user_id} was modified concurrently")
        self.user_id = user_id


class RemoteServiceError(Exception):
    """Base class for failures reported by a remote gateway."""

    pass


class RemoteUnavailableError(RemoteServiceError):
    """Raised when a remote service cannot be reached, times out, or errors.

    Carries the name of the service so callers can report which side failed.
    """

    def __init__(self, service: str, reason: str) -> None:
        super().__init__(f"{service} service unavailable: {reason}")
        self.service = service
        self.reason = reason


class BidRejectedError(RemoteServiceError):
    """Raised when the Auction service refuses a bid.

    The message is the remote service's explanation, surfaced verbatim
    (e.g. bid below the current highest bid, auction closed).
    """

    pass


class AuctionRejectedError(RemoteServiceError):
    """Raised when the Auction service refuses to create an auction."""

    pass


class NoStandingBidError(RemoteServiceError):
    """Raised when a retraction targets a bidder with no standing bid."""

    pass


class AuctionNotFoundError(RemoteServiceError):
    """Raised when the Auction service does not know an auction."""

    pass


class ItemUnknownError(RemoteServiceError):
    """Raised when the Item service does not know an item."""

    pass
