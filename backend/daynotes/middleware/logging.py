"""
DayNotes Backend — Request Logging Middleware
==============================================

What:  One access-log line per HTTP request: method, path, status, duration.
How:   Times the downstream call and logs at a level chosen by status class.
When:  Runs inside RequestIDMiddleware so the request ID is already set.

Request bodies (note text) are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from daynotes.middleware.request_id import request_id_var

logger = logging.getLogger("daynotes.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with its outcome.

    Levels:
        5xx → ERROR, 4xx → WARNING, everything else → INFO

    /health is skipped; probes run every few seconds.
    """

    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
