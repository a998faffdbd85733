"""
Storyboard Backend — Request Logging Middleware
================================================

What:  One access-log line per request on the `storyboard.access` logger.
How:   Times the downstream call and logs method, path, status, duration,
       request ID and client address. The level follows the status:
       5xx → ERROR, 4xx → WARNING, otherwise INFO.

Example:
    2026-01-15T12:00:00 [WARNING] storyboard.access: PUT /api/parts/3 401 2.4ms [a1b2c3d4] from 127.0.0.1

Request bodies (part text, passwords, image bytes) are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from storyboard.middleware.request_id import request_id_var

logger = logging.getLogger("storyboard.access")

# Polled by load balancers; not worth a line each
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS or path.startswith("/uploads/"):
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
