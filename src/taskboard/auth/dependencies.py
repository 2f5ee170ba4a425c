"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current user from the request. The token issuer,
handshake state and Google client all live on app.state (built from
Settings in create_app), so these dependencies are also the seams
tests override.

Status codes follow the bearer-token contract:
- no / malformed Authorization header → 401
- token present but bad signature or expired → 403
"""

import uuid
from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from taskboard.auth.google import GoogleOAuthClient
from taskboard.auth.handshake import HandshakeState
from taskboard.auth.jwt import TokenError, TokenExpiredError, TokenIssuer
from taskboard.errors import AuthenticationError, AuthorizationError

logger = structlog.get_logger()


class CurrentUser:
    """The authenticated user making the request, as asserted by the token."""

    def __init__(self, user_id: uuid.UUID, email: str):
        self.user_id = user_id
        self.email = email


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_handshake_state(request: Request) -> HandshakeState:
    return request.app.state.handshake_state


def get_google_client(request: Request) -> GoogleOAuthClient:
    return request.app.state.google_client


async def get_current_user(
    authorization: Optional[str] = Header(None),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> CurrentUser:
    """Extract the current user from the Bearer token (required)."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authentication required")

    try:
        claims = issuer.verify(token.strip())
    except TokenExpiredError as e:
        logger.info("auth.token_expired")
        raise AuthorizationError(str(e))
    except TokenError as e:
        logger.info("auth.token_invalid", error=str(e))
        raise AuthorizationError("Invalid token")

    structlog.contextvars.bind_contextvars(user_id=str(claims.user_id))
    return CurrentUser(user_id=claims.user_id, email=claims.email)
