"""Auth service — registration, login, token refresh, logout.

Learn: The refresh token is stored on the user row. That single column is
what makes refresh tokens revocable:
- login overwrites it → every earlier refresh token stops working
- logout clears it    → the current refresh token stops working
- refresh compares the presented token to the stored one, byte for byte

Refresh does NOT rotate the refresh token: it only mints a new access
token, from the user's current row (so a role change made by an admin
shows up in the next access token).
"""

from functools import lru_cache
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.jwt import REFRESH, TokenClaim, TokenCodec, TokenError
from taskboard.auth.password import hash_password, verify_password
from taskboard.db.models import Role, User
from taskboard.errors import (
    DuplicateEmail,
    InvalidCredentials,
    InvalidOrExpiredToken,
    MissingToken,
    NotFound,
    RevokedToken,
)

logger = structlog.get_logger()


def claim_for(user: User) -> TokenClaim:
    return TokenClaim(user_id=user.id, email=user.email, role=user.role.value)


@lru_cache(maxsize=None)
def _dummy_hash(rounds: Optional[int]) -> str:
    """Stand-in hash checked for unknown emails, at the configured cost."""
    return hash_password("not-a-real-account", rounds=rounds)


class AuthService:
    """Turns credentials into sessions (token pairs) and renews them."""

    def __init__(
        self,
        db: AsyncSession,
        codec: TokenCodec,
        bcrypt_rounds: Optional[int] = None,
    ):
        self.db = db
        self.codec = codec
        self.bcrypt_rounds = bcrypt_rounds

    async def _get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def _start_session(self, user: User) -> tuple[str, str]:
        """Issue a token pair and persist the refresh token (last write wins)."""
        claim = claim_for(user)
        access_token = self.codec.issue_access_token(claim)
        refresh_token = self.codec.issue_refresh_token(claim)
        user.refresh_token = refresh_token
        await self.db.commit()
        await self.db.refresh(user)
        return access_token, refresh_token

    # ─── Register ────────────────────────────────────────

    async def register(
        self, email: str, password: str, name: str
    ) -> tuple[User, str, str]:
        """Create a USER account and log it in.

        Returns (user, access_token, refresh_token).
        """
        if await self._get_by_email(email):
            raise DuplicateEmail()

        user = User(
            email=email,
            name=name,
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
            role=Role.USER,
        )
        self.db.add(user)
        try:
            await self.db.flush()  # need the id for the token claims
        except IntegrityError:
            # lost a race with a concurrent registration of the same email
            await self.db.rollback()
            raise DuplicateEmail()

        access_token, refresh_token = await self._start_session(user)
        logger.info("auth.registered", user_id=user.id)
        return user, access_token, refresh_token

    # ─── Login ───────────────────────────────────────────

    async def login(self, email: str, password: str) -> tuple[User, str, str]:
        """Check credentials and start a new session.

        Unknown email and wrong password raise the same InvalidCredentials,
        and both pay for one bcrypt check so timing doesn't tell them apart.
        """
        user = await self._get_by_email(email)
        password_hash = user.password_hash if user else _dummy_hash(self.bcrypt_rounds)
        if not verify_password(password, password_hash) or not user:
            logger.info("auth.login_failed")
            raise InvalidCredentials()

        access_token, refresh_token = await self._start_session(user)
        logger.info("auth.login", user_id=user.id)
        return user, access_token, refresh_token

    # ─── Refresh ─────────────────────────────────────────

    async def refresh(self, refresh_token: Optional[str]) -> str:
        """Exchange the stored refresh token for a new access token."""
        if not refresh_token:
            raise MissingToken()

        try:
            claim = self.codec.verify(refresh_token, REFRESH)
        except TokenError:
            raise InvalidOrExpiredToken()

        user = await self.db.get(User, claim.user_id)
        if not user or user.refresh_token != refresh_token:
            logger.info("auth.refresh_revoked", user_id=claim.user_id)
            raise RevokedToken()

        return self.codec.issue_access_token(claim_for(user))

    # ─── Logout ──────────────────────────────────────────

    async def logout(self, refresh_token: Optional[str]) -> None:
        """Revoke the presented refresh token if it's the current one.

        Idempotent: a missing, invalid or already-revoked token is a no-op.
        """
        if not refresh_token:
            return
        try:
            claim = self.codec.verify(refresh_token, REFRESH)
        except TokenError:
            return

        user = await self.db.get(User, claim.user_id)
        if user and user.refresh_token == refresh_token:
            user.refresh_token = None
            await self.db.commit()
            logger.info("auth.logout", user_id=user.id)

    # ─── Current user ────────────────────────────────────

    async def current_user(self, claim: TokenClaim) -> User:
        user = await self.db.get(User, claim.user_id)
        if not user:
            raise NotFound("User not found")
        return user
