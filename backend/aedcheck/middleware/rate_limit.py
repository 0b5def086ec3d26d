"""
AEDCheck Backend — Rate Limiting Middleware
============================================

What:  Per-client sliding-window request limit.
Why:   The equipment list can return thousands of rows per call; a runaway
       client script should not be able to page through the whole registry
       in a loop.
How:   A deque of request timestamps per client IP. Timestamps older than
       the window are dropped on each request; a full window answers 429
       with Retry-After.

Production Upgrade Path:
    Single-process only. Multi-worker deployments need a shared store
    (Redis INCR + EXPIRE) behind the same middleware.
"""

import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from aedcheck.config import settings
from aedcheck.exceptions import RateLimitExceededError
from aedcheck.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Limits default to settings.rate_limit_requests per rate_limit_window."""

    EXCLUDED_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})
    # Idle clients are swept every this many requests
    SWEEP_EVERY = 1000

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._seen = 0

    def _retry_after(self, hits: Deque[float], now: float) -> int:
        return int(hits[0] + self.window_seconds - now) + 1

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        now = self._clock()
        window_start = now - self.window_seconds

        hits = self._hits.setdefault(client, deque())
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= self.max_requests:
            exc = RateLimitExceededError(retry_after=self._retry_after(hits, now))
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds",
                client,
                len(hits),
                self.window_seconds,
            )
            # Raised exceptions do not reach the app's handlers from here
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        hits.append(now)
        self._seen += 1
        if self._seen % self.SWEEP_EVERY == 0:
            self._sweep(window_start)

        return await call_next(request)

    def _sweep(self, window_start: float) -> None:
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for key in idle:
            del self._hits[key]
        if idle:
            logger.debug("Dropped %d idle rate-limit entries", len(idle))
