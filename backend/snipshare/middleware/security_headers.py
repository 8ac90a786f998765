"""
SnipShare — Security Headers Middleware
========================================

What:  Adds browser hardening headers to every response.
Why:   Snippet pages display user-supplied code; a strict Content-Security-Policy
       keeps a snippet that slips past escaping from running scripts, and the
       framing/sniffing headers close the usual clickjacking and MIME tricks.

Script sources:
    'self' plus code.jquery.com and cdn.jsdelivr.net, which host the
    Bootstrap/jQuery bundles the layout loads.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snipshare.config import settings

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "base-uri 'self'",
    "font-src 'self' https: data:",
    "form-action 'self'",
    "frame-ancestors 'self'",
    "img-src 'self' data:",
    "object-src 'none'",
    "script-src 'self' code.jquery.com cdn.jsdelivr.net",
    "script-src-attr 'none'",
    "style-src 'self' https: 'unsafe-inline'",
])

SECURITY_HEADERS = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Cross-Origin-Opener-Policy": "same-origin",
    "Referrer-Policy": "no-referrer",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Sets SECURITY_HEADERS (and HSTS in production) unless a handler set them."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=15552000; includeSubDomains"
            )
        return response
