"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
- Access token: short-lived (15min), sent as `Authorization: Bearer ...`
- Refresh token: long-lived (7 days), travels only in an HttpOnly cookie
  and is also stored on the user row so it can be revoked.

Each kind is signed with its own secret and carries a "type" field, so an
access token can never pass as a refresh token (or the other way around).
The token contains the user id, email and role.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Request

from taskboard.config import Settings

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Raised when token verification fails (for any reason)."""


@dataclass(frozen=True)
class TokenClaim:
    """Identity carried inside a token."""

    user_id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


class TokenCodec:
    """Mint and verify access/refresh tokens."""

    def __init__(self, config: Settings):
        self.algorithm = config.jwt_algorithm
        self.access_ttl = timedelta(minutes=config.access_token_expire_minutes)
        self.refresh_ttl = timedelta(days=config.refresh_token_expire_days)
        self._secrets = {
            ACCESS: config.jwt_access_secret,
            REFRESH: config.jwt_refresh_secret,
        }

    def issue_access_token(
        self, claim: TokenClaim, expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create a JWT access token."""
        return self._encode(claim, ACCESS, expires_delta or self.access_ttl)

    def issue_refresh_token(
        self, claim: TokenClaim, expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create a JWT refresh token."""
        return self._encode(claim, REFRESH, expires_delta or self.refresh_ttl)

    def verify(self, token: str, kind: str) -> TokenClaim:
        """Verify and decode a token of the given kind.

        Returns the claim on success. Raises TokenError on failure; the
        message never says whether the signature, the expiry or the type
        was the problem.
        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
            if payload.get("type") != kind:
                raise TokenError("Token verification failed")
            return TokenClaim(
                user_id=int(payload["sub"]),
                email=payload["email"],
                role=payload["role"],
            )
        except (jwt.InvalidTokenError, KeyError, ValueError):
            raise TokenError("Token verification failed")

    def _encode(self, claim: TokenClaim, kind: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            # PyJWT 2.10+ requires "sub" to be a string
            "sub": str(claim.user_id),
            "email": claim.email,
            "role": claim.role,
            "type": kind,
            # unique per token, so two logins in the same second still differ
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=self.algorithm)


def get_token_codec(request: Request) -> TokenCodec:
    """FastAPI dependency — codec built from the settings the app was created with."""
    return TokenCodec(request.app.state.settings)
