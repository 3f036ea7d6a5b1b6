"""JWT issuing and validation for the platform's bearer tokens.

Tokens are signed with a shared secret (HS256 by default) so that the other
platform services can validate the same token without calling back here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

if TYPE_CHECKING:
    from shared_kernel.auth.observability import JWTProbe


@dataclass(frozen=True)
class TokenClaims:
    """Validated JWT claims."""

    sub: str
    username: str
    role: str


@dataclass(frozen=True)
class AccessToken:
    """A freshly issued bearer token."""

    token: str
    expires_at: datetime
    token_type: str = "bearer"


class InvalidTokenError(Exception):
    """Raised when JWT validation fails."""

    pass


class JWTService:
    """Issues and validates signed JWTs.

    Claims carried: sub (user ID), username, role, iat, exp, iss.
    """

    def __init__(
        self,
        secret: str,
        probe: JWTProbe,
        issuer: str = "limcoin-users",
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(minutes=60),
    ):
        """Initialize the JWT service.

        Args:
            secret: Shared signing secret.
            probe: Observability probe for logging events.
            issuer: Value of the iss claim, checked on validation.
            algorithm: Signing algorithm.
            ttl: Lifetime of issued tokens.
        """
        self._secret = secret
        self._probe = probe
        self._issuer = issuer
        self._algorithm = algorithm
        self._ttl = ttl

    def issue_token(self, sub: str, username: str, role: str) -> AccessToken:
        """Issue a signed token for an authenticated user."""
        now = datetime.now(tz=timezone.utc)
        expires_at = now + self._ttl
        token = jwt.encode(
            {
                "sub": sub,
                "username": username,
                "role": role,
                "iss": self._issuer,
                "iat": int(now.timestamp()),
                "exp": int(expires_at.timestamp()),
            },
            self._secret,
            algorithm=self._algorithm,
        )
        self._probe.token_issued(user_id=sub)
        return AccessToken(token=token, expires_at=expires_at)

    def validate_token(self, token: str) -> TokenClaims:
        """Validate JWT and return claims.

        Args:
            token: The JWT token string.

        Returns:
            TokenClaims containing the validated claims.

        Raises:
            InvalidTokenError: If token is invalid, expired, or verification fails.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={
                    "verify_signature": True,
                    "verify_aud": False,
                    "verify_iss": True,
                    "verify_exp": True,
                },
            )
        except ExpiredSignatureError as e:
            self._probe.token_validation_failed(reason="Token expired")
            raise InvalidTokenError("Token has expired") from e
        except JWTClaimsError as e:
            self._probe.token_validation_failed(reason=f"Claims error: {e}")
            raise InvalidTokenError(f"Invalid token claims: {e}") from e
        except JWTError as e:
            self._probe.token_validation_failed(reason=f"JWT error: {e}")
            raise InvalidTokenError(f"Invalid token: {e}") from e

        for claim in ("sub", "username", "role"):
            if claims.get(claim) is None:
                self._probe.token_validation_failed(reason=f"Missing {claim} claim")
                raise InvalidTokenError(f"Missing required claim: {claim}")

        self._probe.token_validated(user_id=str(claims["sub"]))

        return TokenClaims(
            sub=str(claims["sub"]),
            username=str(claims["username"]),
            role=str(claims["role"]),
        )
