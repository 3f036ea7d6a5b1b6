"""Authentication shared kernel module."""

from shared_kernel.auth.observability import (
    DefaultJWTProbe,
    JWTProbe,
)
from shared_kernel.auth.tokens import (
    AccessToken,
    InvalidTokenError,
    JWTService,
    TokenClaims,
)

__all__ = [
    "AccessToken",
    "InvalidTokenError",
    "JWTService",
    "JWTProbe",
    "DefaultJWTProbe",
    "TokenClaims",
]
