"""Bearer token authentication dependencies."""

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accounts.application.value_objects import CurrentUser
from accounts.domain.value_objects import UserId, UserRole
from infrastructure.settings import get_account_settings
from shared_kernel.auth import DefaultJWTProbe, InvalidTokenError, JWTService
from shared_kernel.observability_context import ObservationContext

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_jwt_service() -> JWTService:
    """Get cached JWT service configured from account settings.

    Returns:
        JWTService instance shared across requests
    """
    settings = get_account_settings()
    return JWTService(
        secret=settings.jwt_secret.get_secret_value(),
        probe=DefaultJWTProbe(),
        issuer=settings.jwt_issuer,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(minutes=settings.token_ttl_minutes),
    )


def _to_current_user(jwt_service: JWTService, token: str) -> CurrentUser:
    try:
        claims = jwt_service.validate_token(token)
        return CurrentUser(
            user_id=UserId.from_string(claims.sub),
            username=claims.username,
            role=UserRole(claims.role),
        )
    except (InvalidTokenError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_current_user(
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> CurrentUser:
    """Resolve the caller from the Authorization header.

    Raises:
        HTTPException 401: If the token is missing or invalid
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _to_current_user(jwt_service, credentials.credentials)


async def get_optional_user(
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> CurrentUser | None:
    """Resolve the caller if a token was sent.

    Registration is open to anonymous callers, but an admin caller may
    create other admins. A token that is present must still be valid.
    """
    if credentials is None:
        return None
    return _to_current_user(jwt_service, credentials.credentials)


async def get_observation_context(
    current_user: Annotated[CurrentUser | None, Depends(get_optional_user)],
    x_request_id: Annotated[str | None, Header(alias="X-Request-ID")] = None,
) -> ObservationContext:
    """Build the request-scoped context bound to every probe."""
    if current_user is None:
        return ObservationContext(request_id=x_request_id)
    return ObservationContext(
        request_id=x_request_id,
        caller_id=current_user.user_id.value,
        caller_role=current_user.role.value,
    )
