"""JWT bearer tokens.

Learn: JWT (JSON Web Token) provides stateless authentication. The
token carries the user id (sub) and email; the server keeps no session
table. Tokens live 24 hours by default and are never refreshed — the
user logs in again.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt


class TokenError(Exception):
    """Raised when a token can't be verified."""


class TokenExpiredError(TokenError):
    """Raised when a token's exp claim is in the past."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    email: str


class TokenIssuer:
    """Mints and verifies signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=24),
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, user_id: uuid.UUID, email: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify signature and expiry, return the claims.

        Raises TokenExpiredError or TokenError.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        try:
            user_id = uuid.UUID(payload["sub"])
        except (ValueError, TypeError):
            raise TokenError("Invalid token: malformed subject")
        return TokenClaims(user_id=user_id, email=payload.get("email", ""))
