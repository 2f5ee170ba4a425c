"""Google OAuth 2.0 client (authorization code flow).

Learn: Three HTTP touch points with Google:
1. authorization_url() — where we redirect the browser
2. exchange_code()     — callback code → access token (server to server)
3. fetch_profile()     — access token → OpenID userinfo (sub + email)

Only the stable subject id and the email leave this module, as an
ExternalProfile. Any provider failure surfaces as OAuthError.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx
import structlog

logger = structlog.get_logger()

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = ("openid", "email", "profile")


class OAuthError(Exception):
    """Raised when the identity provider rejects or fails a request."""


@dataclass(frozen=True)
class ExternalProfile:
    external_id: str
    email: Optional[str]


class GoogleOAuthClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """Trade the authorization code for an access token."""
        data = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            async with self._client() as c:
                r = await c.post(TOKEN_URL, data=data)
        except httpx.HTTPError as e:
            raise OAuthError(f"Token endpoint unreachable: {e}")

        if r.status_code != 200:
            logger.warning("google.token_rejected", status=r.status_code)
            raise OAuthError(f"Token exchange failed ({r.status_code})")

        token = r.json().get("access_token")
        if not token:
            raise OAuthError("Token response has no access_token")
        return token

    async def fetch_profile(self, access_token: str) -> ExternalProfile:
        try:
            async with self._client() as c:
                r = await c.get(
                    USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as e:
            raise OAuthError(f"Userinfo endpoint unreachable: {e}")

        if r.status_code != 200:
            logger.warning("google.userinfo_rejected", status=r.status_code)
            raise OAuthError(f"Userinfo request failed ({r.status_code})")

        info = r.json()
        if not info.get("sub"):
            raise OAuthError("Userinfo response has no subject id")
        return ExternalProfile(external_id=str(info["sub"]), email=info.get("email"))

    async def authenticate(self, code: str) -> ExternalProfile:
        """Full callback step: code → token → profile."""
        access_token = await self.exchange_code(code)
        return await self.fetch_profile(access_token)
