"""Google sign-in flow tests — redirect, callback, link-or-create.

Learn: Google itself is replaced with a MagicMock GoogleOAuthClient via
dependency_overrides, so the tests drive the real handshake state,
identity linking and token issuance. The callback always answers with
a redirect to the frontend: ?token= on success, ?error= otherwise.
"""

from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

import pytest

from taskboard.auth.dependencies import get_google_client
from taskboard.auth.google import AUTHORIZE_URL, ExternalProfile, GoogleOAuthClient, OAuthError
from taskboard.auth.handshake import STATE_COOKIE
from taskboard.auth.jwt import TokenIssuer

from conftest import TEST_PASSWORD

FAILED = "http://frontend.test/?error=google-auth-failed"
ERROR = "http://frontend.test/?error=google-auth-error"


@pytest.fixture
def google(app):
    """Fake Google: authenticate() returns a fixed profile."""
    fake = MagicMock(spec=GoogleOAuthClient)
    fake.authenticate = AsyncMock(
        return_value=ExternalProfile(external_id="g-100", email="g@example.com")
    )
    app.dependency_overrides[get_google_client] = lambda: fake
    return fake


@pytest.fixture
def handshake(app):
    """A valid (state, nonce) pair, as if /auth/google had just run."""
    return app.state.handshake_state.issue()


async def _callback(client, state, nonce, **params):
    params.setdefault("code", "auth-code")
    if state is not None:
        params["state"] = state
    headers = {"Cookie": f"{STATE_COOKIE}={nonce}"} if nonce else {}
    return await client.get("/api/auth/google/callback", params=params, headers=headers)


def _token_from(location: str) -> str:
    parsed = urlparse(location)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "http://frontend.test/auth/callback"
    return parse_qs(parsed.query)["token"][0]


# ═══════════════════════════════════════════════════════════
# Step 1: redirect to Google
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_google_redirect_sets_state_cookie(client, app):
    r = await client.get("/api/auth/google")
    assert r.status_code == 302

    location = r.headers["location"]
    assert location.startswith(AUTHORIZE_URL)
    params = parse_qs(urlparse(location).query)
    assert params["client_id"] == ["test-client-id"]
    assert params["redirect_uri"] == ["http://backend.test/api/auth/google/callback"]

    set_cookie = r.headers["set-cookie"]
    assert set_cookie.startswith(f"{STATE_COOKIE}=")
    assert "HttpOnly" in set_cookie
    assert "Path=/api/auth/google/callback" in set_cookie

    # The state in the URL is bound to the nonce in the cookie
    nonce = set_cookie.split(";")[0].split("=", 1)[1]
    app.state.handshake_state.verify(params["state"][0], nonce)


# ═══════════════════════════════════════════════════════════
# Step 2: callback
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_callback_creates_user_and_issues_token(client, settings, google, handshake):
    state, nonce = handshake
    r = await _callback(client, state, nonce)
    assert r.status_code == 302
    google.authenticate.assert_awaited_once_with("auth-code")

    token = _token_from(r.headers["location"])
    claims = TokenIssuer(settings.jwt_secret).verify(token)
    assert claims.email == "g@example.com"

    # The handshake cookie is cleared
    assert "Max-Age=0" in r.headers["set-cookie"]

    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["email"] == "g@example.com"


@pytest.mark.asyncio
async def test_google_only_account_cannot_password_login(client, google, handshake):
    state, nonce = handshake
    await _callback(client, state, nonce)

    r = await client.post(
        "/api/auth/login", json={"email": "g@example.com", "password": TEST_PASSWORD}
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_callback_links_existing_account(client, login_as, google, handshake):
    """Same email as a password account → one user, both sign-ins work."""
    headers = await login_as(email="g@example.com")
    me = (await client.get("/api/auth/me", headers=headers)).json()

    state, nonce = handshake
    r = await _callback(client, state, nonce)
    token = _token_from(r.headers["location"])
    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.json()["id"] == me["id"]

    r = await client.post(
        "/api/auth/login", json={"email": "g@example.com", "password": TEST_PASSWORD}
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_callback_state_mismatch(client, app, google, handshake):
    state, _ = handshake
    _, other_nonce = app.state.handshake_state.issue()
    r = await _callback(client, state, other_nonce)
    assert r.status_code == 302
    assert r.headers["location"] == FAILED
    google.authenticate.assert_not_awaited()


@pytest.mark.asyncio
async def test_callback_without_cookie(client, google, handshake):
    state, _ = handshake
    r = await _callback(client, state, None)
    assert r.headers["location"] == FAILED


@pytest.mark.asyncio
async def test_callback_provider_error(client, google, handshake):
    """User pressed "cancel" on Google's consent screen."""
    state, nonce = handshake
    r = await _callback(client, state, nonce, error="access_denied")
    assert r.headers["location"] == FAILED
    google.authenticate.assert_not_awaited()


@pytest.mark.asyncio
async def test_callback_exchange_failure(client, google, handshake):
    google.authenticate.side_effect = OAuthError("Token exchange failed (400)")
    state, nonce = handshake
    r = await _callback(client, state, nonce)
    assert r.headers["location"] == FAILED


@pytest.mark.asyncio
async def test_callback_profile_without_email(client, google, handshake):
    google.authenticate.return_value = ExternalProfile(external_id="g-200", email=None)
    state, nonce = handshake
    r = await _callback(client, state, nonce)
    assert r.headers["location"] == FAILED


@pytest.mark.asyncio
async def test_callback_unexpected_error(client, google, handshake):
    google.authenticate.side_effect = RuntimeError("boom")
    state, nonce = handshake
    r = await _callback(client, state, nonce)
    assert r.status_code == 302
    assert r.headers["location"] == ERROR
