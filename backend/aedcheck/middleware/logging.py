"""
AEDCheck Backend — Access Log Middleware
=========================================

What:  One log line per request: method, path, status, duration, client.
Why:   403 bursts from one client or slow equipment queries are the first
       things looked for when a health center reports a problem.
How:   Level follows the status class (5xx ERROR, 4xx WARNING, else INFO).
       Query strings are not logged: they can carry region or serial
       filters tied to a person's assignment.

Example:
    GET /api/equipment 403 12.4ms [a1b2c3d4] from 10.0.0.7
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from aedcheck.middleware.request_id import request_id_var

logger = logging.getLogger("aedcheck.access")

QUIET_PATHS = frozenset({"/health"})


def status_log_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        status = response.status_code
        logger.log(
            status_log_level(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
