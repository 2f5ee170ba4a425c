"""HTTP translation of domain errors.

Learn: Services raise taskboard.errors exceptions; this module is the one
place they become HTTP responses. Every failure body has the same shape,
{"message": "..."}, whether it came from a service, from request
validation, or from an unexpected crash.

- TaskboardError subclasses → their own status_code
- RequestValidationError    → 400 (malformed body / path params)
- HTTPException             → its status, message from detail
- anything else             → 500, logged with traceback, no internals leaked
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.errors import AuthenticationError, TaskboardError

logger = structlog.get_logger()


def _message(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "path", "query")]
        field = ".".join(loc)
        parts.append(f"{field}: {err.get('msg')}" if field else err.get("msg", ""))
    return "Invalid request. " + "; ".join(parts) if parts else "Invalid request."


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskboardError)
    async def handle_domain_error(request: Request, exc: TaskboardError):
        headers = None
        if isinstance(exc, AuthenticationError):
            headers = {"WWW-Authenticate": "Bearer"}
        return _message(exc.status_code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return _message(400, _describe_validation(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return _message(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(
            "http.unhandled_error",
            method=request.method,
            path=request.url.path,
        )
        return _message(500, "Internal server error.")
