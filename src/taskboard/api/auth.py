"""Auth API — registration, login, token refresh, logout.

Learn: Routes for the session lifecycle:
- POST /auth/register → create a USER account, start a session
- POST /auth/login    → email/password → access token + refresh cookie
- POST /auth/refresh  → refresh cookie → new access token
- POST /auth/logout   → revoke the refresh token, clear the cookie
- GET  /auth/me       → current user info

The access token goes in the JSON body. The refresh token only ever
travels in an HttpOnly, SameSite=Strict cookie scoped to the auth routes.
"""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import require_auth
from taskboard.auth.jwt import TokenClaim, TokenCodec, get_token_codec
from taskboard.config import Settings
from taskboard.db.engine import get_db
from taskboard.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserRead,
)
from taskboard.services.auth_service import AuthService

router = APIRouter(prefix="/auth")

REFRESH_COOKIE = "refreshToken"
REFRESH_COOKIE_PATH = "/api/auth"


def _config(request: Request) -> Settings:
    return request.app.state.settings


def _svc(
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
    config: Settings = Depends(_config),
) -> AuthService:
    return AuthService(db, codec, bcrypt_rounds=config.bcrypt_rounds)


def _set_refresh_cookie(response: Response, token: str, config: Settings) -> None:
    response.set_cookie(
        REFRESH_COOKIE,
        token,
        max_age=config.refresh_token_expire_days * 24 * 60 * 60,
        path=REFRESH_COOKIE_PATH,
        httponly=True,
        secure=config.is_production,
        samesite="strict",
    )


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    svc: AuthService = Depends(_svc),
    config: Settings = Depends(_config),
):
    """Create a new user account (role USER) and log it in."""
    user, access_token, refresh_token = await svc.register(
        email=body.email, password=body.password, name=body.name
    )
    _set_refresh_cookie(response, refresh_token, config)
    return {"user": user, "access_token": access_token}


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    response: Response,
    svc: AuthService = Depends(_svc),
    config: Settings = Depends(_config),
):
    """Login with email and password. Revokes any earlier refresh token."""
    user, access_token, refresh_token = await svc.login(body.email, body.password)
    _set_refresh_cookie(response, refresh_token, config)
    return {"user": user, "access_token": access_token}


# ─── Refresh ────────────────────────────────────────────


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh(
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    svc: AuthService = Depends(_svc),
):
    """Exchange the refresh cookie for a new access token."""
    access_token = await svc.refresh(refresh_token)
    return {"access_token": access_token}


# ─── Logout ─────────────────────────────────────────────


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    svc: AuthService = Depends(_svc),
    config: Settings = Depends(_config),
):
    """Revoke the refresh token (if current) and clear the cookie."""
    await svc.logout(refresh_token)
    response.delete_cookie(
        REFRESH_COOKIE,
        path=REFRESH_COOKIE_PATH,
        httponly=True,
        secure=config.is_production,
        samesite="strict",
    )
    return {"message": "Logged out"}


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    claim: TokenClaim = Depends(require_auth),
    svc: AuthService = Depends(_svc),
):
    """Get the current authenticated user's info."""
    return await svc.current_user(claim)
