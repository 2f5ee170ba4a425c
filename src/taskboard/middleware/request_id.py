"""Request ID middleware — one traceable id per request.

Learn: A client-supplied X-Request-ID is reused when it looks sane
(non-empty, at most 128 printable characters); anything else is
replaced with a fresh UUID so junk never reaches the logs. The id is
bound to structlog's contextvars, echoed in the response header, and
one http.request line is logged per request with status and timing.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

HEADER = "X-Request-ID"
_MAX_LEN = 128


def _pick_request_id(incoming: str) -> str:
    if incoming and len(incoming) <= _MAX_LEN and incoming.isprintable():
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _pick_request_id(request.headers.get(HEADER, "").strip())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        response: Response = await call_next(request)
        response.headers[HEADER] = request_id

        logger.info(
            "http.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response
