"""Service wiring for the accounts bounded context."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.application.observability import (
    AccountServiceProbe,
    BiddingServiceProbe,
    DefaultAccountServiceProbe,
    DefaultBiddingServiceProbe,
)
from accounts.application.services import AccountService, BiddingService
from accounts.dependencies.authentication import (
    get_jwt_service,
    get_observation_context,
)
from accounts.dependencies.gateways import (
    get_auction_gateway,
    get_user_lock,
    get_valuation_gateway,
)
from accounts.infrastructure.auction_gateway import HttpAuctionGateway
from accounts.infrastructure.locking import KeyedUserLock
from accounts.infrastructure.observability import (
    DefaultRemoteGatewayProbe,
    DefaultUserRepositoryProbe,
)
from accounts.infrastructure.user_repository import UserRepository
from accounts.infrastructure.valuation_gateway import HttpValuationGateway
from infrastructure.database.dependencies import get_session
from infrastructure.settings import get_account_settings
from shared_kernel.auth import JWTService
from shared_kernel.observability_context import ObservationContext


def get_account_service_probe(
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> AccountServiceProbe:
    """Get AccountServiceProbe bound to the request context."""
    return DefaultAccountServiceProbe().with_context(context)


def get_bidding_service_probe(
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> BiddingServiceProbe:
    """Get BiddingServiceProbe bound to the request context."""
    return DefaultBiddingServiceProbe().with_context(context)


def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> UserRepository:
    """Get UserRepository instance.

    Args:
        session: Async database session
        context: Request observation context

    Returns:
        UserRepository instance
    """
    return UserRepository(
        session=session, probe=DefaultUserRepositoryProbe().with_context(context)
    )


def get_account_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    user_lock: Annotated[KeyedUserLock, Depends(get_user_lock)],
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
    probe: Annotated[AccountServiceProbe, Depends(get_account_service_probe)],
) -> AccountService:
    """Get AccountService instance.

    FastAPI caches get_session per request, so the service and the
    repository share one session.
    """
    return AccountService(
        session=session,
        user_repository=user_repository,
        user_lock=user_lock,
        jwt_service=jwt_service,
        starting_grant=get_account_settings().starting_grant,
        probe=probe,
    )


def get_bidding_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    auction_gateway: Annotated[HttpAuctionGateway, Depends(get_auction_gateway)],
    valuation_gateway: Annotated[
        HttpValuationGateway, Depends(get_valuation_gateway)
    ],
    user_lock: Annotated[KeyedUserLock, Depends(get_user_lock)],
    probe: Annotated[BiddingServiceProbe, Depends(get_bidding_service_probe)],
) -> BiddingService:
    """Get BiddingService instance."""
    return BiddingService(
        session=session,
        user_repository=user_repository,
        auction_gateway=auction_gateway,
        valuation_gateway=valuation_gateway,
        user_lock=user_lock,
        probe=probe,
    )
