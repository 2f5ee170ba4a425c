"""Auth API — signup, password login, Google sign-in, current user.

Learn: Routes for the two ways into the app:
- POST /auth/signup → create a password account
- POST /auth/login → email/password → bearer token
- GET /auth/google → redirect the browser to Google
- GET /auth/google/callback → Google → link-or-create user → redirect
  back to the frontend with ?token= (or ?error=)
- GET /auth/me, DELETE /auth/me → the current account

The Google callback never answers with JSON: it always redirects to the
frontend, because the browser (not an API client) is on the other end.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Cookie, Depends, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import (
    CurrentUser,
    get_current_user,
    get_google_client,
    get_handshake_state,
    get_token_issuer,
)
from taskboard.auth.google import GoogleOAuthClient, OAuthError
from taskboard.auth.handshake import STATE_COOKIE, HandshakeError, HandshakeState
from taskboard.auth.jwt import TokenIssuer
from taskboard.db.engine import get_db
from taskboard.errors import TaskboardError
from taskboard.schemas.auth import Credentials, TokenResponse, UserRead
from taskboard.services.account_service import AccountService
from taskboard.services.identity_service import IdentityService

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")

_CALLBACK_PATH = "/api/auth/google/callback"


def _accounts(request: Request, db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(db, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)


def _identities(db: AsyncSession = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


# ─── Password accounts ──────────────────────────────────


@router.post("/signup", response_model=UserRead, status_code=201)
async def signup(body: Credentials, svc: AccountService = Depends(_accounts)):
    """Create a new password account."""
    return await svc.signup(body.email, body.password)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: Credentials,
    svc: AccountService = Depends(_accounts),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Login with email and password → bearer token."""
    user = await svc.authenticate(body.email, body.password)
    return TokenResponse(token=issuer.issue(user.id, user.email))


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    current: CurrentUser = Depends(get_current_user),
    svc: AccountService = Depends(_accounts),
):
    return await svc.get_user(current.user_id)


@router.delete("/me", status_code=204)
async def delete_me(
    current: CurrentUser = Depends(get_current_user),
    svc: AccountService = Depends(_accounts),
):
    """Delete the account with all its boards and tasks."""
    await svc.delete_account(current.user_id)
    return Response(status_code=204)


# ─── Google sign-in ─────────────────────────────────────


@router.get("/google")
async def google_login(
    google: GoogleOAuthClient = Depends(get_google_client),
    handshake: HandshakeState = Depends(get_handshake_state),
):
    """Step 1: send the browser to Google's consent screen."""
    state, nonce = handshake.issue()
    response = RedirectResponse(google.authorization_url(state), status_code=302)
    response.set_cookie(
        STATE_COOKIE,
        nonce,
        max_age=int(handshake.ttl.total_seconds()),
        path=_CALLBACK_PATH,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    nonce: Optional[str] = Cookie(None, alias=STATE_COOKIE),
    google: GoogleOAuthClient = Depends(get_google_client),
    handshake: HandshakeState = Depends(get_handshake_state),
    identities: IdentityService = Depends(_identities),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Step 2: Google redirects back here with ?code=&state=."""
    frontend = request.app.state.settings.frontend_url

    def finish(url: str) -> RedirectResponse:
        response = RedirectResponse(url, status_code=302)
        response.delete_cookie(STATE_COOKIE, path=_CALLBACK_PATH)
        return response

    try:
        if error:
            raise OAuthError(f"Provider returned error: {error}")
        if not code:
            raise OAuthError("Missing authorization code")
        handshake.verify(state, nonce)
        profile = await google.authenticate(code)
        user = await identities.link_or_create(profile)
    except (OAuthError, HandshakeError, TaskboardError) as e:
        logger.warning("auth.google_failed", error=str(e))
        return finish(f"{frontend}/?error=google-auth-failed")
    except Exception:
        logger.exception("auth.google_error")
        return finish(f"{frontend}/?error=google-auth-error")

    logger.info("auth.google_login", user_id=str(user.id))
    token = issuer.issue(user.id, user.email)
    return finish(f"{frontend}/auth/callback?token={token}")
