"""
SnipShare — Request Logging Middleware
=======================================

What:  One access log line per request: method, path, status, duration, client.
Why:   uvicorn's own access log has no request id and no duration.
Who:   Logs on the `snipshare.access` logger.

Most POSTs here answer with a 303, so the redirect target is appended to the
line ("POST /create 303 -> /"); that is usually the quickest way to tell a
saved form from a re-rendered one.

Privacy: form bodies (passwords, code), cookies (session ids) and query
strings are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snipshare.middleware.request_id import request_id_var

logger = logging.getLogger("snipshare.access")

# Probed every few seconds; logging them buries real traffic
QUIET_PATHS = {"/health"}


def access_level(status: int, path: str) -> int:
    """5xx → ERROR, 4xx → WARNING, static assets → DEBUG, the rest → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    if path.startswith("/static/"):
        return logging.DEBUG
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        status = response.status_code
        target = response.headers.get("location")
        client = request.client.host if request.client else "-"

        logger.log(
            access_level(status, path),
            "%s %s %d%s %.1fms [%s] %s",
            request.method,
            path,
            status,
            f" -> {target}" if target else "",
            elapsed_ms,
            request_id_var.get(""),
            client,
        )
        return response
