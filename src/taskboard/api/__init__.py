"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: Board and task routes take the current user as an explicit
Depends(get_current_user) parameter because every handler needs the
user id for ownership checks. Health and auth routers are open; the
/auth/me routes authenticate individually.
"""

from fastapi import APIRouter

from taskboard.api.auth import router as auth_router
from taskboard.api.boards import router as boards_router
from taskboard.api.health import router as health_router
from taskboard.api.tasks import router as tasks_router

api_router = APIRouter(prefix="/api")

# Open routes: no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes: bearer token required
api_router.include_router(boards_router, tags=["boards"])
api_router.include_router(tasks_router, tags=["tasks"])
