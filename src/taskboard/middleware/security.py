"""Security headers middleware.

Learn: Stamps a fixed set of headers on every response:
- X-Content-Type-Options: prevents MIME-type sniffing
- X-Frame-Options: prevents clickjacking
- Referrer-Policy: keeps tokens in redirect URLs out of third-party referrers

Plus two conditional ones:
- Cache-Control: no-store on /api/auth responses, which carry tokens
- Strict-Transport-Security: only when the request came in over HTTPS
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

_ALWAYS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
_HSTS = "max-age=31536000; includeSubDomains"
_NO_STORE_PREFIX = "/api/auth"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(_ALWAYS)
        if request.url.path.startswith(_NO_STORE_PREFIX):
            response.headers["Cache-Control"] = "no-store"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = _HSTS
        return response
