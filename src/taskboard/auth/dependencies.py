"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request.

Per-request flow:
- no Authorization header       → anonymous (claim is None)
- header that isn't "Bearer x"  → 401
- bearer token fails to verify  → 401
- bearer token verifies         → TokenClaim, stored on request.state.claim

FastAPI caches a dependency for the lifetime of one request, so the token
is verified exactly once no matter how many dependencies ask for it.
Identity is never read from a header other than Authorization.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from taskboard.auth.jwt import ACCESS, TokenClaim, TokenCodec, TokenError, get_token_codec
from taskboard.errors import Forbidden, InvalidOrExpiredToken, Unauthorized


async def get_current_claim_optional(
    request: Request,
    authorization: Optional[str] = Header(None),
    codec: TokenCodec = Depends(get_token_codec),
) -> Optional[TokenClaim]:
    """Extract the current claim (optional — returns None if no auth).

    Learn: This is the "soft" auth dependency. A missing header is fine,
    a present-but-broken one is not.
    """
    if authorization is None:
        return None

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        raise Unauthorized("Invalid Authorization header")

    try:
        claim = codec.verify(token, ACCESS)
    except TokenError:
        raise InvalidOrExpiredToken()

    request.state.claim = claim
    structlog.contextvars.bind_contextvars(user_id=claim.user_id)
    return claim


async def require_auth(
    claim: Optional[TokenClaim] = Depends(get_current_claim_optional),
) -> TokenClaim:
    """Require an authenticated caller (401 otherwise)."""
    if claim is None:
        raise Unauthorized()
    return claim


async def require_admin(
    claim: TokenClaim = Depends(require_auth),
) -> TokenClaim:
    """Require an authenticated ADMIN (401 if anonymous, 403 if not admin)."""
    if not claim.is_admin:
        raise Forbidden()
    return claim
