"""OAuth handshake state — CSRF protection for the Google redirect dance.

Learn: The "state" parameter sent to Google must come back unchanged on
the callback, and it must be tied to the browser that started the flow.
We do that without a server-side session:
- state  = short-lived JWT signed with the session secret, carrying a nonce
- cookie = the same nonce, HttpOnly, scoped to the callback path
The callback verifies the signature, the expiry, and that the nonce in
the state matches the cookie.

Separate from auth.jwt: signed with the session secret and checked
against its own audience claim.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

STATE_COOKIE = "taskboard_oauth_nonce"
_AUDIENCE = "taskboard:oauth-state"


class HandshakeError(Exception):
    """Raised when the OAuth state doesn't check out."""


class HandshakeState:
    """Issues and verifies the state/nonce pair for one OAuth round trip."""

    def __init__(self, secret: str, ttl: timedelta = timedelta(minutes=10)):
        self.secret = secret
        self.ttl = ttl

    def issue(self) -> tuple[str, str]:
        """Return (state, nonce). The nonce goes into the cookie."""
        nonce = secrets.token_urlsafe(24)
        now = datetime.now(timezone.utc)
        state = jwt.encode(
            {"nonce": nonce, "aud": _AUDIENCE, "iat": now, "exp": now + self.ttl},
            self.secret,
            algorithm="HS256",
        )
        return state, nonce

    def verify(self, state: Optional[str], nonce: Optional[str]) -> None:
        if not state or not nonce:
            raise HandshakeError("Missing OAuth state")
        try:
            payload = jwt.decode(
                state, self.secret, algorithms=["HS256"], audience=_AUDIENCE
            )
        except jwt.InvalidTokenError as e:
            raise HandshakeError(f"Invalid OAuth state: {e}")
        if not secrets.compare_digest(payload.get("nonce", ""), nonce):
            raise HandshakeError("OAuth state does not match this browser")
