"""Health endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status, version and DB check."""
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_without_redis_is_still_healthy(client):
    """Redis is optional — when it isn't connected the app reports it disabled."""
    data = (await client.get("/api/health")).json()
    assert data["redis"] == "disabled"
    assert data["status"] == "healthy"


@pytest.mark.asyncio
async def test_liveness_message(client):
    r = await client.get("/api/test")
    assert r.status_code == 200
    assert r.json() == {"message": "Backend API is running!"}


@pytest.mark.asyncio
async def test_unknown_route_uses_message_shape(client):
    """Framework 404s come back in the same {"message": ...} shape."""
    r = await client.get("/api/nope")
    assert r.status_code == 404
    assert "message" in r.json()
