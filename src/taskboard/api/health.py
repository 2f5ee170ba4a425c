"""Health check endpoints.

Learn: /health verifies the server is running and the database (and,
when configured, Redis) is reachable. /test is the plain liveness probe
the frontend pings on load.
"""

from fastapi import APIRouter, Request
from sqlalchemy import text

from taskboard import __version__
from taskboard.redis_pool import get_redis

router = APIRouter()


@router.get("/test")
async def liveness():
    return {"message": "Backend API is running!"}


@router.get("/health")
async def health_check(request: Request):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    # Check database
    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    # Redis is optional (rate limiting only)
    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except RuntimeError:
        checks["redis"] = "disabled"
    except Exception as e:
        checks["redis"] = f"error: {e}"

    status = "healthy" if checks["database"] == "ok" and checks["redis"] in (
        "ok", "disabled"
    ) else "degraded"

    return {"status": status, **checks}
