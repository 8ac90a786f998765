"""
SnipShare — Rate Limiting Middleware
=====================================

What:  Per-IP sliding window limit on form submissions.
Why:   Every POST is either a credential check (bcrypt, deliberately slow and
       a password-guessing target) or a write. Page views stay unlimited.
How:   SlidingWindow keeps the POST timestamps of each client; a POST over
       the limit gets the 429 page with a Retry-After header.

Counters live in process memory. With several uvicorn workers each worker
enforces its own window.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snipshare.config import settings
from snipshare.exceptions import RateLimitExceededError
from snipshare.templating import render

logger = logging.getLogger(__name__)

LIMITED_METHODS = {"POST"}

# Forget idle clients every this many recorded hits
SWEEP_EVERY = 1000


class SlidingWindow:
    """
    Timestamps of recent hits per key.

    `limit` and `window` are read through callables so a settings change
    takes effect without rebuilding the middleware stack.
    """

    def __init__(
        self,
        limit: Callable[[], int],
        window: Callable[[], int],
        clock: Callable[[], float] = time.monotonic,
    ):
        self._limit = limit
        self._window = window
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._recorded = 0

    def hit(self, key: str) -> Optional[int]:
        """
        Record a hit for `key`.

        Returns None when the hit is allowed, otherwise the number of seconds
        until the oldest hit in the window expires (the hit is not recorded).
        """
        now = self._clock()
        window = self._window()
        hits = self._hits[key]
        while hits and hits[0] <= now - window:
            hits.popleft()

        if len(hits) >= self._limit():
            return int(hits[0] + window - now) + 1

        hits.append(now)
        self._recorded += 1
        if self._recorded % SWEEP_EVERY == 0:
            self._sweep(now - window)
        return None

    def _sweep(self, horizon: float) -> None:
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= horizon]
        for key in idle:
            del self._hits[key]
        if idle:
            logger.debug("Forgot %d idle rate-limit clients", len(idle))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies a SlidingWindow sized from settings to every POST."""

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self.window = SlidingWindow(
            limit=lambda: settings.rate_limit_requests,
            window=lambda: settings.rate_limit_window,
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method not in LIMITED_METHODS:
            return await call_next(request)

        # Behind a proxy run uvicorn with --proxy-headers so this is the
        # browser's address rather than the proxy's
        client_ip = request.client.host if request.client else "unknown"

        retry_after = self.window.hit(client_ip)
        if retry_after is None:
            return await call_next(request)

        exc = RateLimitExceededError(retry_after=retry_after)
        logger.warning(
            "Rate limit exceeded for %s on %s, retry in %ds",
            client_ip,
            request.url.path,
            retry_after,
        )
        return render(
            request,
            "errors/429.html",
            {"message": exc.message, "retry_after": retry_after},
            status_code=429,
            headers={"Retry-After": str(retry_after)},
        )
